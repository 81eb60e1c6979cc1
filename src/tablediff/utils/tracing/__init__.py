"""
Distributed tracing using OpenTelemetry.

Instruments comparison runs, chunked execution and binary encoding so a
collector can show where time goes on large datasets.
"""

from .spans import add_span_attributes, add_span_event, trace_function, trace_operation
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "trace_function",
    "add_span_attributes",
    "add_span_event",
]
