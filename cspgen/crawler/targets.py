"""Target URL normalization and validation."""

from __future__ import annotations

import string
from urllib.parse import urlparse

from cspgen.errors import InvalidInputError

_ALLOWED_SCHEMES = ("http://", "https://")
INVALID_URL_DETAILS = "Please enter a valid URL (e.g., https://example.com or example.com)"


def normalize_target_url(url: str) -> str:
    """Trim the input and prefix ``https://`` when no http(s) scheme is given.

    Raises InvalidInputError if the result still is not a usable URL.
    """
    normalized = (url or "").strip()
    if not normalized:
        raise InvalidInputError(INVALID_URL_DETAILS, detail_message="URL is empty")
    if not normalized.lower().startswith(_ALLOWED_SCHEMES):
        normalized = "https://" + normalized

    error = validate_target_url(normalized)
    if error is not None:
        raise InvalidInputError(INVALID_URL_DETAILS, detail_message=error)
    return normalized


def validate_target_url(url: str) -> str | None:
    """Validate a normalized target URL, returning an error message or None if valid."""
    if "\x00" in url or "\\" in url:
        return f"Invalid URL: {url!r}"

    try:
        parsed = urlparse(url)
        parsed.port
    except ValueError as exc:
        return f"Invalid URL: {exc}"

    if parsed.scheme not in ("http", "https"):
        return f"Invalid scheme '{parsed.scheme}'; only http/https allowed"

    hostname = parsed.hostname
    if not hostname:
        return "Missing hostname in URL"

    if any(ch in string.whitespace for ch in parsed.netloc):
        return "Hostname contains whitespace"

    return None
