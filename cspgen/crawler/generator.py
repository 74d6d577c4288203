"""Generate a CSP for a page by observing one browser page load."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

import structlog

from cspgen.config.loader import CSPGenSettings, get_settings, load_wildcard_domains
from cspgen.crawler.session import (
    WAIT_DOM_CONTENT_LOADED,
    WAIT_LOAD,
    WAIT_NETWORK_IDLE,
    BrowserSession,
    PlaywrightSession,
)
from cspgen.crawler.targets import normalize_target_url
from cspgen.errors import CSPGenerationError, PageLoadError, classify_navigation_error
from cspgen.logging_config import crawl_context
from cspgen.policy.aggregator import DirectiveAggregator
from cspgen.policy.csp_builder import serialize
from cspgen.policy.normalizer import normalize
from cspgen.policy.origin import OriginResolver

logger = structlog.get_logger()

SessionFactory = Callable[[CSPGenSettings], BrowserSession]

_MISSING_BROWSER_HINT = "Playwright browser is missing. Run: python -m playwright install chromium"


def _default_session_factory(settings: CSPGenSettings) -> BrowserSession:
    return PlaywrightSession(headless=settings.browser_headless, user_agent=settings.user_agent)


def _wait_tiers(settings: CSPGenSettings) -> list[tuple[str, int]]:
    """(wait strategy, settle delay ms) pairs, tried strictly in order."""
    return [
        (WAIT_NETWORK_IDLE, 0),
        (WAIT_DOM_CONTENT_LOADED, settings.dom_settle_ms),
        (WAIT_LOAD, settings.load_settle_ms),
    ]


async def load_page(session: BrowserSession, url: str, settings: CSPGenSettings) -> str:
    """Load ``url`` using the escalating wait policy.

    Returns the wait strategy that succeeded. Raises the taxonomy error for
    the last tier's failure once every tier has failed.
    """
    last_error: Exception | None = None
    for wait_until, settle_ms in _wait_tiers(settings):
        try:
            await session.navigate(url, wait_until, settings.nav_timeout_ms)
            if settle_ms:
                await session.settle(settle_ms)
        except Exception as exc:
            last_error = exc
            logger.info("navigation_tier_failed", url=url, wait_until=wait_until, error=str(exc))
            continue
        return wait_until

    message = str(last_error) if last_error is not None else "Unknown error"
    raise classify_navigation_error(message)


async def _close_session(session: BrowserSession) -> None:
    """Close the session; a teardown failure never replaces the run's outcome."""
    try:
        await session.close()
    except Exception as exc:
        logger.warning("session_close_failed", error=str(exc))


async def generate_csp(
    url: str,
    use_wildcards: bool = True,
    *,
    settings: CSPGenSettings | None = None,
    session_factory: SessionFactory | None = None,
    wildcard_domains: Sequence[str] | None = None,
) -> str:
    """Crawl ``url`` once and return the synthesized CSP string.

    The browser session is closed on every exit path before any error
    propagates.
    """
    settings = settings or get_settings()
    target = normalize_target_url(url)
    if wildcard_domains is None:
        wildcard_domains = load_wildcard_domains(settings.wildcard_domains_file)

    resolver = OriginResolver.for_target(target, wildcard_domains, use_wildcards)
    aggregator = DirectiveAggregator(resolver)
    session = (session_factory or _default_session_factory)(settings)
    session.on_request(aggregator.ingest)

    with crawl_context(url=target, use_wildcards=use_wildcards):
        logger.info("csp_generation_started", base_origin=resolver.base_origin)
        start = time.monotonic()

        try:
            try:
                await session.launch()
            except Exception as exc:
                message = str(exc)
                details = _MISSING_BROWSER_HINT if "Executable doesn't exist" in message else message
                raise PageLoadError(details, detail_message=message) from exc

            wait_until = await load_page(session, target, settings)
            logger.info("page_loaded", wait_until=wait_until)
        except CSPGenerationError as exc:
            logger.error("page_load_failed", error=exc.label, detail=exc.detail_message)
            raise
        finally:
            await _close_session(session)

        policy = normalize(aggregator.snapshot(), resolver.base_origin)
        csp = serialize(policy)
        logger.info(
            "csp_generated",
            ingested=aggregator.ingested,
            discarded=aggregator.discarded,
            duration_ms=round((time.monotonic() - start) * 1000),
        )
    return csp
