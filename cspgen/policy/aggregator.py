"""Per-directive source aggregation for one page load."""

from __future__ import annotations

import threading

import structlog

from cspgen.policy.directives import DATA, SELF, Directive, admits, classify, is_data_url
from cspgen.policy.origin import OriginResolver

logger = structlog.get_logger()

Policy = dict[Directive, set[str]]


def new_policy() -> Policy:
    """Empty policy with every directive present and default-src seeded with 'self'."""
    policy: Policy = {directive: set() for directive in Directive}
    policy[Directive.DEFAULT_SRC].add(SELF)
    return policy


def copy_policy(policy: Policy) -> Policy:
    return {directive: set(tokens) for directive, tokens in policy.items()}


class DirectiveAggregator:
    """Accumulate resolved sources from request events into a policy.

    ``ingest`` may be called from browser callbacks on any thread; all
    mutation happens under one lock. Ingestion is idempotent and
    order-independent.
    """

    def __init__(self, resolver: OriginResolver) -> None:
        self._resolver = resolver
        self._policy = new_policy()
        self._lock = threading.Lock()
        self.ingested = 0
        self.discarded = 0

    def ingest(self, request_url: str, resource_kind: str) -> None:
        """Record one observed request; unusable events contribute nothing."""
        directive = classify(resource_kind, request_url)
        if directive is None:
            self._discard(request_url, resource_kind, "unmapped_kind")
            return

        if is_data_url(request_url):
            token: str | None = DATA
        else:
            token = self._resolver.resolve(request_url)
        if token is None:
            self._discard(request_url, resource_kind, "unparsable_url")
            return
        if not admits(directive, token):
            self._discard(request_url, resource_kind, "same_origin_frame")
            return

        with self._lock:
            self._policy[directive].add(token)
            self.ingested += 1

    def _discard(self, request_url: str, resource_kind: str, reason: str) -> None:
        with self._lock:
            self.discarded += 1
        logger.debug(
            "request_event_discarded",
            url=request_url[:200],
            resource_kind=resource_kind,
            reason=reason,
        )

    def snapshot(self) -> Policy:
        """Independent copy of the aggregated policy."""
        with self._lock:
            return copy_policy(self._policy)
