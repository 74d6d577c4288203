"""Browser session used to load a page and observe its outgoing requests."""

from __future__ import annotations

import abc
from collections.abc import Callable

import structlog
from playwright.async_api import Browser, Page, Playwright, Request, async_playwright

logger = structlog.get_logger()

RequestCallback = Callable[[str, str], None]

# Page-load wait strategies, in escalation order
WAIT_NETWORK_IDLE = "networkidle"
WAIT_DOM_CONTENT_LOADED = "domcontentloaded"
WAIT_LOAD = "load"


class BrowserSession(abc.ABC):
    """One browser, one page, one crawl.

    Request callbacks receive ``(request_url, resource_kind)`` for every
    outgoing request the page makes. ``close`` must be safe to call more
    than once; only the first call tears anything down.
    """

    def __init__(self) -> None:
        self._callbacks: list[RequestCallback] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def on_request(self, callback: RequestCallback) -> None:
        """Subscribe to request events for the lifetime of the page."""
        self._callbacks.append(callback)

    def _emit(self, request_url: str, resource_kind: str) -> None:
        for callback in self._callbacks:
            try:
                callback(request_url, resource_kind)
            except Exception as exc:
                logger.warning("request_callback_error", url=request_url[:200], error=str(exc))

    @abc.abstractmethod
    async def launch(self) -> None:
        ...

    @abc.abstractmethod
    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        """Navigate to ``url``, returning once ``wait_until`` is reached."""
        ...

    @abc.abstractmethod
    async def settle(self, delay_ms: int) -> None:
        """Pause while late resource loads keep firing request events."""
        ...

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._teardown()

    @abc.abstractmethod
    async def _teardown(self) -> None:
        ...


class PlaywrightSession(BrowserSession):
    """Headless Chromium session backed by Playwright's async API."""

    def __init__(self, *, headless: bool = True, user_agent: str = "") -> None:
        super().__init__()
        self._headless = headless
        self._user_agent = user_agent
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None

    async def launch(self) -> None:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self._headless)
        context_kwargs = {"user_agent": self._user_agent} if self._user_agent else {}
        context = await self._browser.new_context(**context_kwargs)
        self._page = await context.new_page()
        self._page.on("request", self._handle_request)
        logger.debug("browser_launched", headless=self._headless)

    def _handle_request(self, request: Request) -> None:
        self._emit(request.url, request.resource_type)

    async def navigate(self, url: str, wait_until: str, timeout_ms: int) -> None:
        if self._page is None:
            raise RuntimeError("Browser session not launched")
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def settle(self, delay_ms: int) -> None:
        if self._page is None:
            raise RuntimeError("Browser session not launched")
        await self._page.wait_for_timeout(delay_ms)

    async def _teardown(self) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._page = None
            self._browser = None
            self._playwright = None
        logger.debug("browser_closed")
