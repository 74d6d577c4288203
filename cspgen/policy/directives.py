"""CSP directives, browser resource kinds, and the kind -> directive classifier."""

from __future__ import annotations

from enum import Enum

SELF = "'self'"
DATA = "data:"


class Directive(str, Enum):
    """Fetch directives a generated policy can carry, in output order."""

    DEFAULT_SRC = "default-src"
    SCRIPT_SRC = "script-src"
    STYLE_SRC = "style-src"
    IMG_SRC = "img-src"
    FONT_SRC = "font-src"
    CONNECT_SRC = "connect-src"
    MEDIA_SRC = "media-src"
    FRAME_SRC = "frame-src"
    OBJECT_SRC = "object-src"


class ResourceKind(str, Enum):
    """Resource type labels reported by the browser for outgoing requests."""

    DOCUMENT = "document"
    STYLESHEET = "stylesheet"
    IMAGE = "image"
    MEDIA = "media"
    FONT = "font"
    SCRIPT = "script"
    TEXTTRACK = "texttrack"
    XHR = "xhr"
    FETCH = "fetch"
    EVENTSOURCE = "eventsource"
    WEBSOCKET = "websocket"
    MANIFEST = "manifest"
    FRAME = "frame"
    IFRAME = "iframe"
    OBJECT = "object"
    OTHER = "other"

    @classmethod
    def parse(cls, label: str | ResourceKind) -> ResourceKind:
        """Parse a browser label; anything unrecognised is OTHER."""
        if isinstance(label, cls):
            return label
        try:
            return cls(str(label).strip().lower())
        except ValueError:
            return cls.OTHER


def is_data_url(request_url: str) -> bool:
    return request_url[:5].lower() == DATA


def directive_for(kind: ResourceKind) -> Directive | None:
    """Directive a resource kind populates, or None to discard it."""
    match kind:
        case ResourceKind.SCRIPT:
            return Directive.SCRIPT_SRC
        case ResourceKind.STYLESHEET:
            return Directive.STYLE_SRC
        case ResourceKind.IMAGE:
            return Directive.IMG_SRC
        case ResourceKind.FONT:
            return Directive.FONT_SRC
        case ResourceKind.XHR | ResourceKind.FETCH:
            return Directive.CONNECT_SRC
        case ResourceKind.MEDIA:
            return Directive.MEDIA_SRC
        case ResourceKind.DOCUMENT | ResourceKind.FRAME | ResourceKind.IFRAME:
            return Directive.FRAME_SRC
        case _:
            return None


def classify(resource_kind: str | ResourceKind, request_url: str) -> Directive | None:
    """Map an observed request to the directive it belongs in.

    ``data:`` URLs only count for images (as the ``data:`` source); every
    other ``data:`` request is discarded.
    """
    kind = ResourceKind.parse(resource_kind)
    if is_data_url(request_url):
        return Directive.IMG_SRC if kind is ResourceKind.IMAGE else None
    return directive_for(kind)


def admits(directive: Directive, token: str) -> bool:
    """Whether a resolved token may be added to ``directive``.

    The page's own navigation (and same-origin frames) resolve to 'self' and
    must not populate frame-src.
    """
    if directive is Directive.FRAME_SRC and token == SELF:
        return False
    return True
