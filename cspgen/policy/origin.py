"""Resolve request URLs into CSP source tokens."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlparse

from cspgen.policy.directives import SELF

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def _split(url: str) -> tuple[str, str, int | None] | None:
    """Return (scheme, hostname, explicit non-default port) or None if unparsable."""
    if not url or "\x00" in url:
        return None
    try:
        parsed = urlparse(url.strip())
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    hostname = parsed.hostname
    if not scheme or not hostname:
        return None

    # Browsers report origins with punycode hosts
    try:
        hostname = hostname.encode("idna").decode("ascii")
    except UnicodeError:
        pass

    if port is not None and port == _DEFAULT_PORTS.get(scheme):
        port = None
    return scheme, hostname, port


def _format_host(hostname: str) -> str:
    return f"[{hostname}]" if ":" in hostname else hostname


def origin_of(url: str) -> str | None:
    """Serialized origin (``scheme://host[:port]``) of a URL, or None.

    Default ports are dropped, matching a browser's ``URL.origin``.
    """
    parts = _split(url)
    if parts is None:
        return None
    scheme, hostname, port = parts
    origin = f"{scheme}://{_format_host(hostname)}"
    if port is not None:
        origin = f"{origin}:{port}"
    return origin


def match_wildcard_domain(hostname: str, wildcard_table: Sequence[str]) -> str | None:
    """First suffix in the table the hostname ends with."""
    for suffix in wildcard_table:
        if hostname.endswith(suffix):
            return suffix
    return None


def resolve(
    request_url: str,
    base_origin: str,
    wildcard_table: Sequence[str],
    wildcard_mode: bool = True,
) -> str | None:
    """Resolve a request URL into a source token.

    - same origin as ``base_origin`` -> ``'self'``
    - wildcard mode and hostname under a table suffix -> ``scheme://*.suffix``
      (or ``scheme://suffix`` for the apex domain itself)
    - otherwise the literal origin ``scheme://host[:port]``

    Returns None when the URL cannot be parsed; the caller skips the event.
    """
    parts = _split(request_url)
    if parts is None:
        return None
    scheme, hostname, _port = parts

    origin = origin_of(request_url)
    if origin == base_origin:
        return SELF

    if wildcard_mode:
        suffix = match_wildcard_domain(hostname, wildcard_table)
        if suffix is not None:
            if hostname == suffix:
                return f"{scheme}://{suffix}"
            return f"{scheme}://*.{suffix}"

    return origin


class OriginResolver:
    """Resolver bound to one run's base origin and wildcard configuration."""

    def __init__(
        self,
        base_origin: str,
        wildcard_table: Sequence[str] = (),
        wildcard_mode: bool = True,
    ) -> None:
        self.base_origin = base_origin
        self.wildcard_table = tuple(wildcard_table)
        self.wildcard_mode = wildcard_mode

    @classmethod
    def for_target(
        cls,
        target_url: str,
        wildcard_table: Sequence[str] = (),
        wildcard_mode: bool = True,
    ) -> OriginResolver:
        base = origin_of(target_url)
        if base is None:
            raise ValueError(f"Cannot determine origin of {target_url!r}")
        return cls(base, wildcard_table, wildcard_mode)

    def resolve(self, request_url: str) -> str | None:
        return resolve(request_url, self.base_origin, self.wildcard_table, self.wildcard_mode)
