"""Observability helpers."""

from codex_sessions.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_listing,
    record_parser_failure,
    record_deletion,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_listing",
    "record_parser_failure",
    "record_deletion",
]
