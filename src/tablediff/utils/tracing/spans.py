"""
Span helpers used across tablediff.

Span attribute values are stringified so tuples of column names and
dataclass values can be attached without conversion at the call site.
"""

import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from .tracer import get_tracer


def _as_attributes(values: dict[str, Any]) -> dict[str, str]:
    return {name: str(value) for name, value in values.items()}


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes: Any,
) -> Iterator[Span]:
    """
    Run the enclosed block inside a new current span.

    An exception escaping the block marks the span as failed, is recorded
    on it, and is re-raised unchanged.

        with trace_operation("diff.primary_key", source_rows=10) as span:
            result = drive(matcher.steps())
            span.set_attribute("modified", len(result.modified))
    """
    with get_tracer().start_as_current_span(
        operation_name,
        kind=kind,
        attributes=_as_attributes(attributes),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as exc:
            span.set_attribute("error.type", type(exc).__name__)
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise


def add_span_attributes(**attributes: Any) -> None:
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(_as_attributes(attributes))


def add_span_event(name: str, **attributes: Any) -> None:
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=_as_attributes(attributes))


def trace_function(operation_name: str | None = None, **default_attributes: Any) -> Callable:
    """
    Decorate a function so every call runs inside trace_operation().

    The span is named ``module.function`` unless ``operation_name`` is given.
    """

    def decorator(func: Callable) -> Callable:
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with trace_operation(span_name, function=func.__name__, **default_attributes):
                return func(*args, **kwargs)

        return wrapper

    return decorator
