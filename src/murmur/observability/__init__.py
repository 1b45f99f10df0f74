"""Observability module for murmur.

Structured JSON logging with request and event correlation IDs.
"""

from murmur.observability.logging import (
    LogContext,
    configure_logging,
    correlation_id_var,
    event_id_var,
    request_id_var,
)

__all__ = [
    "configure_logging",
    "LogContext",
    "request_id_var",
    "correlation_id_var",
    "event_id_var",
]
