"""Health and readiness endpoints."""

from __future__ import annotations

from pathlib import Path

import structlog
from fastapi import APIRouter
from playwright.async_api import async_playwright

from cspgen.config.loader import get_settings, load_wildcard_domains

logger = structlog.get_logger()
router = APIRouter()


async def _check_browser() -> bool:
    """Check that Playwright's Chromium build is installed."""
    try:
        async with async_playwright() as p:
            return Path(p.chromium.executable_path).exists()
    except Exception as exc:
        logger.warning("browser_check_failed", error=str(exc))
        return False


def _wildcard_domain_count() -> int:
    return len(load_wildcard_domains(get_settings().wildcard_domains_file))


@router.get("/health")
async def health():
    """Health check: process is up and configuration is loaded."""
    return {
        "status": "healthy",
        "service": "up",
        "wildcard_domains": _wildcard_domain_count(),
    }


@router.get("/ready")
async def ready():
    """Readiness check: Chromium is installed and the wildcard table is loaded."""
    browser_ok = await _check_browser()
    try:
        domains = _wildcard_domain_count()
    except Exception as exc:
        logger.warning("wildcard_table_check_failed", error=str(exc))
        domains = 0

    if browser_ok and domains:
        return {"status": "ready"}

    from fastapi.responses import JSONResponse

    return JSONResponse(
        status_code=503,
        content={
            "status": "not_ready",
            "browser": "ok" if browser_ok else "missing",
            "wildcard_domains": domains,
        },
    )
