"""Observability: structured logging setup."""

from file_loader.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
    request_context,
)


__all__ = [
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "get_logger",
    "request_context",
]
