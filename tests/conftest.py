"""Shared test fixtures."""

from __future__ import annotations

import pytest
import structlog
from fastapi.testclient import TestClient

SYNTHETIC_WILDCARDS = ("jsdelivr.net", "cdn.test", "gstatic.com")


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    monkeypatch.setenv("CSPGEN_LOG_JSON", "false")
    monkeypatch.setenv("CSPGEN_LOG_LEVEL", "debug")
    monkeypatch.setenv("CSPGEN_DOM_SETTLE_MS", "3000")
    monkeypatch.setenv("CSPGEN_LOAD_SETTLE_MS", "2000")

    # Reset cached settings
    import cspgen.config.loader as loader
    loader._settings = None
    loader.reset_wildcard_cache()
    yield
    loader._settings = None
    loader.reset_wildcard_cache()
    # drop loggers bound to per-test capture streams
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def wildcard_table():
    """Small synthetic wildcard domain table."""
    return SYNTHETIC_WILDCARDS


@pytest.fixture
def settings():
    from cspgen.config.loader import load_settings

    return load_settings()


@pytest.fixture
def client():
    """Create a FastAPI test client."""
    from cspgen.main import app

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
