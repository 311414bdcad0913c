"""
SEEDi Observability Layer

Tracing and logging setup.
"""

from seedi.observability.logging import JsonFormatter, configure_logging
from seedi.observability.tracer import (
    Span,
    SpanStatus,
    Tracer,
    get_tracer,
    reset_tracers,
)

__all__ = [
    # Tracer
    "Tracer",
    "Span",
    "SpanStatus",
    "get_tracer",
    "reset_tracers",
    # Logging
    "configure_logging",
    "JsonFormatter",
]
