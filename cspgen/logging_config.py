"""structlog setup and per-crawl log context."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO
from uuid import uuid4

import structlog


def setup_logging(
    log_level: str = "info",
    json_format: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog to write JSON or console lines to ``stream``.

    The CLI keeps stdout for the policy, so the default stream is stderr.
    Every event carries the crawl context bound by ``crawl_context``.
    """
    stream = stream or sys.stderr
    level = getattr(logging, log_level.upper(), logging.INFO)

    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    # uvicorn logs through the stdlib
    logging.basicConfig(level=level, stream=stream, format="%(name)s %(levelname)s %(message)s", force=True)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def new_run_id() -> str:
    return uuid4().hex[:8]


@contextmanager
def crawl_context(**fields) -> Iterator[str]:
    """Bind a run id plus ``fields`` (url, use_wildcards ...) to every log event.

    Nested contexts reuse the enclosing run id, so the API request and the
    crawl it starts share one. Yields the run id.
    """
    run_id = structlog.contextvars.get_contextvars().get("run_id") or new_run_id()
    with structlog.contextvars.bound_contextvars(run_id=run_id, **fields):
        yield run_id
