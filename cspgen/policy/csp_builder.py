"""Pure-function CSP (Content-Security-Policy) serialization utilities."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from cspgen.policy.directives import Directive


def sort_sources(tokens: Iterable[str]) -> list[str]:
    """Quoted keywords first, then everything else, each group in ordinal order."""
    return sorted(tokens, key=lambda t: (not t.startswith("'"), t))


def serialize(policy: Mapping[Directive, Iterable[str]]) -> str:
    """Build a CSP string from a normalized policy.

    Directives are emitted in ``Directive`` declaration order and empty ones
    are omitted. The output is identical for equal policies regardless of
    token insertion order.

    Example:
        >>> serialize({Directive.DEFAULT_SRC: {"'self'"}, Directive.IMG_SRC: {"data:", "'self'"}})
        "default-src 'self'; img-src 'self' data:;"
    """
    csp = ""
    for directive in Directive:
        tokens = policy.get(directive)
        if not tokens:
            continue
        csp += f"{directive.value} {' '.join(sort_sources(tokens))}; "
    return csp.rstrip()


def parse_csp(csp_string: str) -> dict[str, list[str]]:
    """Parse a CSP string into {directive: [values]} dict.

    Example:
        >>> parse_csp("default-src 'self'; script-src 'self' https:")
        {"default-src": ["'self'"], "script-src": ["'self'", "https:"]}
    """
    result: dict[str, list[str]] = {}
    if not csp_string or not csp_string.strip():
        return result
    for part in csp_string.split(";"):
        part = part.strip()
        if not part:
            continue
        tokens = part.split()
        if not tokens:
            continue
        directive = tokens[0].lower()
        values = tokens[1:]
        result[directive] = values
    return result
