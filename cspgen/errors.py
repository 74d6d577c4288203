"""Error taxonomy for CSP generation failures.

Every error carries a short ``label`` and a human-readable ``details`` string,
which the HTTP layer returns verbatim. ``detail_message`` keeps the
underlying collaborator message for logs and the ``fullError`` field.

Per-resource failures (a single request URL that does not parse) are not
represented here: they resolve to ``None`` and the event is skipped.
"""

from __future__ import annotations


class CSPGenerationError(Exception):
    """Base class for failures that abort a whole generation run."""

    label = "Failed to generate CSP"
    status_code = 500

    def __init__(self, details: str, *, detail_message: str = "") -> None:
        super().__init__(detail_message or details)
        self.details = details
        self.detail_message = detail_message or details


class InvalidInputError(CSPGenerationError):
    """Target URL does not parse even after protocol normalization."""

    label = "Invalid URL"
    status_code = 400


class PageLoadError(CSPGenerationError):
    """Navigation failed for a reason outside the specific kinds below."""


class NavigationTimeoutError(PageLoadError):
    """Every tier of the navigation wait policy exceeded its deadline."""

    label = "Request Timeout"


class NameResolutionError(PageLoadError):
    """The target host could not be resolved."""

    label = "Domain Not Found"


class ProtocolError(PageLoadError):
    """Transport or protocol level failure while loading the page."""

    label = "HTTP/2 Protocol Error"


_NAME_NOT_RESOLVED_DETAILS = "The domain could not be resolved. Please check the URL."
_PROTOCOL_DETAILS = (
    "The website may have HTTP/2 configuration issues. "
    "Try again later or check if the site is accessible."
)
_TIMEOUT_DETAILS = "The page took too long to load. The site may be slow or unreachable."


def classify_navigation_error(message: str) -> PageLoadError:
    """Map a browser navigation error message to a taxonomy error.

    Matching follows Chromium net error codes (``net::ERR_NAME_NOT_RESOLVED``,
    ``net::ERR_HTTP2_PROTOCOL_ERROR`` ...) and Playwright's
    ``Timeout <n>ms exceeded`` wording.
    """
    if "ERR_NAME_NOT_RESOLVED" in message:
        return NameResolutionError(_NAME_NOT_RESOLVED_DETAILS, detail_message=message)
    if "PROTOCOL_ERROR" in message:
        return ProtocolError(_PROTOCOL_DETAILS, detail_message=message)
    if "Timeout" in message or "ERR_TIMED_OUT" in message:
        return NavigationTimeoutError(_TIMEOUT_DETAILS, detail_message=message)
    return PageLoadError(message or "Unknown error", detail_message=message)
