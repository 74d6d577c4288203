"""Post-crawl policy normalization."""

from __future__ import annotations

from urllib.parse import urlparse

from cspgen.policy.aggregator import Policy, copy_policy
from cspgen.policy.directives import SELF, Directive


def is_keyword(token: str) -> bool:
    return token.startswith("'")


def is_origin_expression(token: str) -> bool:
    return "://" in token and not is_keyword(token)


def _is_wildcard(token: str) -> bool:
    return "//*." in token


def _wildcard_cover(token: str, wildcards: set[str]) -> bool:
    """Whether a specific origin token is covered by a wildcard in the same set.

    ``https://cdn.example.net`` is covered by ``https://*.cdn.example.net`` and
    by ``https://*.example.net``. Tokens carrying an explicit port are kept,
    since a port-less wildcard only matches the scheme's default port.
    """
    try:
        parsed = urlparse(token)
        port = parsed.port
    except ValueError:
        return False
    hostname = parsed.hostname
    if not hostname or port is not None:
        return False

    scheme = parsed.scheme
    labels = hostname.split(".")
    for i in range(len(labels)):
        if f"{scheme}://*.{'.'.join(labels[i:])}" in wildcards:
            return True
    return False


def normalize_sources(tokens: set[str], base_origin: str) -> set[str]:
    """Normalize one directive's non-empty source set."""
    result = set(tokens)
    result.add(SELF)

    wildcards = {t for t in result if is_origin_expression(t) and _is_wildcard(t)}
    for token in list(result):
        if not is_origin_expression(token) or _is_wildcard(token):
            continue
        if token == base_origin or _wildcard_cover(token, wildcards):
            result.discard(token)
    return result


def normalize(policy: Policy, base_origin: str) -> Policy:
    """Return a normalized copy of an aggregated policy.

    Every populated directive other than default-src gains 'self'; specific
    origins covered by a wildcard and the literal base origin are removed.
    Keywords and scheme sources (``data:``) are never removed. The function
    is idempotent and does not mutate ``policy``.
    """
    result = copy_policy(policy)
    for directive, tokens in result.items():
        if directive is Directive.DEFAULT_SRC or not tokens:
            continue
        result[directive] = normalize_sources(tokens, base_origin)
    result.setdefault(Directive.DEFAULT_SRC, set()).add(SELF)
    return result
