"""Structured logging for the loader and its command line."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

import structlog


REQUEST_ID_KEY = "request_id"


def _renderer(json_format: bool) -> structlog.types.Processor:
    if json_format:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Route loader events to ``output``.

    Events carry an ISO timestamp, the level and any bound request id.
    Loggers are not cached, so calling this again takes effect for
    loggers that already exist.

    Args:
        level: Lowest level that is emitted.
        output: Stream events are written to.
        json_format: One JSON object per line if True, console text otherwise.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    # httpx logs through the standard library
    logging.basicConfig(format="%(message)s", stream=output, level=level)


def get_logger(component: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, bound to ``component`` when one is given."""
    log: structlog.stdlib.BoundLogger = structlog.get_logger()
    if component is not None:
        log = log.bind(component=component)
    return log


def bind_request_context(request_id: str) -> None:
    """Tag every following event with ``request_id``."""
    structlog.contextvars.bind_contextvars(**{REQUEST_ID_KEY: request_id})


def clear_request_context() -> None:
    """Stop tagging events with a request id."""
    structlog.contextvars.unbind_contextvars(REQUEST_ID_KEY)


@contextmanager
def request_context(request_id: str) -> Iterator[None]:
    """Tag events with ``request_id`` for the duration of the block.

    The id is removed on every exit path, including ``SystemExit`` from a
    failing command.
    """
    bind_request_context(request_id)
    try:
        yield
    finally:
        clear_request_context()
