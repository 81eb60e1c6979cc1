"""
Unit tests for tablediff.utils.tracing
"""

import pytest

from tablediff.utils.tracing import (
    add_span_attributes,
    add_span_event,
    get_tracer,
    shutdown_tracing,
    trace_function,
    trace_operation,
)


class TestTraceOperation:
    """Test span helpers"""

    def teardown_method(self):
        """Release the provider created by get_tracer()"""
        shutdown_tracing()

    def test_get_tracer_initializes_once(self):
        """get_tracer() returns the same tracer until shutdown"""
        assert get_tracer() is get_tracer()

    def test_exception_recorded_and_reraised(self):
        """Errors inside a traced block propagate unchanged"""
        with pytest.raises(KeyError):
            with trace_operation("failing", component="test"):
                raise KeyError("missing")

    def test_helpers_inside_span(self):
        """Attribute and event helpers accept arbitrary values"""
        with trace_operation("working", rows=3) as span:
            add_span_attributes(added=1, columns=("a", "b"))
            add_span_event("checkpoint", index=0)
        assert span is not None

    def test_trace_function_preserves_result_and_name(self):
        """Decorated functions keep their name and return value"""

        @trace_function(component="test")
        def double(value):
            return value * 2

        assert double(21) == 42
        assert double.__name__ == "double"
