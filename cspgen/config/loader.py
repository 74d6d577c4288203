"""YAML + env var config loading with pydantic-settings."""

from __future__ import annotations

import signal
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

_WILDCARD_DOMAINS_PATH = Path(__file__).parent / "wildcard_domains.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML config file, returning empty dict if it does not exist."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


class CSPGenSettings(BaseSettings):
    """Service configuration, overridden by CSPGEN_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="CSPGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    listen_host: str = "0.0.0.0"
    listen_port: int = 3000
    log_level: str = "info"
    log_json: bool = True
    cors_origins: list[str] = ["*"]

    # Navigation wait policy (milliseconds)
    nav_timeout_ms: int = 30000
    dom_settle_ms: int = 3000
    load_settle_ms: int = 2000

    # Browser
    browser_headless: bool = True
    user_agent: str = ""

    # Subdomain generalization table
    wildcard_domains_file: str = str(_WILDCARD_DOMAINS_PATH)


_settings: CSPGenSettings | None = None


def get_settings() -> CSPGenSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> CSPGenSettings:
    """Load settings from env vars (env vars override model defaults)."""
    global _settings
    _settings = CSPGenSettings()
    reset_wildcard_cache()
    logger.info(
        "config_loaded",
        port=_settings.listen_port,
        nav_timeout_ms=_settings.nav_timeout_ms,
        wildcard_domains_file=_settings.wildcard_domains_file,
    )
    return _settings


# Cache of loaded wildcard tables, keyed by file path
_wildcard_tables: dict[str, tuple[str, ...]] = {}


def load_wildcard_domains(path: str | Path | None = None) -> tuple[str, ...]:
    """Load the ordered wildcard domain table from YAML, caching per path.

    The file holds a ``wildcard_domains`` list. Entries are lower-cased and
    stripped of leading dots; blank entries are ignored.
    """
    if path is None:
        path = get_settings().wildcard_domains_file
    key = str(path)
    cached = _wildcard_tables.get(key)
    if cached is not None:
        return cached

    data = _load_yaml(Path(key))
    if not data:
        logger.warning("wildcard_domains_not_found", path=key)

    domains: list[str] = []
    for entry in data.get("wildcard_domains") or []:
        suffix = str(entry).strip().lower().lstrip(".")
        if suffix and suffix not in domains:
            domains.append(suffix)

    table = tuple(domains)
    _wildcard_tables[key] = table
    logger.debug("wildcard_domains_loaded", path=key, count=len(table))
    return table


def reset_wildcard_cache() -> None:
    """Reset the wildcard table cache (for testing)."""
    _wildcard_tables.clear()


def register_reload_handler() -> None:
    """Register SIGHUP handler for hot-reload of configuration."""
    import threading

    if threading.current_thread() is not threading.main_thread():
        logger.debug("skipping_sighup_handler", reason="not main thread")
        return

    def _reload(signum, frame):
        logger.info("config_reload_triggered")
        load_settings()

    try:
        signal.signal(signal.SIGHUP, _reload)
    except (ValueError, AttributeError):
        logger.debug("skipping_sighup_handler", reason="signal not supported")
