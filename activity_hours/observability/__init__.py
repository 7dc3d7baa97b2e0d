"""Observability helpers."""

from activity_hours.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_analysis,
    record_delegation_failure,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_analysis",
    "record_delegation_failure",
]
