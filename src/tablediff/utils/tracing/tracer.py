"""
OpenTelemetry provider lifecycle for tablediff.

One provider is created per process. Spans leave the process only when an
OTLP endpoint is configured or console export is requested.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter

logger = logging.getLogger(__name__)

_provider: TracerProvider | None = None
_tracer: trace.Tracer | None = None


def _exporters(otlp_endpoint: str | None, console_export: bool) -> dict[str, SpanExporter]:
    exporters: dict[str, SpanExporter] = {}
    endpoint = otlp_endpoint or os.getenv("OTLP_ENDPOINT")
    if endpoint:
        exporters[f"otlp({endpoint})"] = OTLPSpanExporter(endpoint=endpoint, insecure=True)
    if console_export or os.getenv("TRACE_CONSOLE", "").lower() == "true":
        exporters["console"] = ConsoleSpanExporter()
    return exporters


def initialize_tracing(
    service_name: str = "tablediff",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install the process-wide tracer provider.

    Args:
        service_name: ``service.name`` resource attribute
        otlp_endpoint: gRPC collector address; OTLP_ENDPOINT is used when omitted
        console_export: Print finished spans to stdout (TRACE_CONSOLE=true also enables it)

    Returns:
        The tablediff tracer. A second call returns the existing one.
    """
    global _provider, _tracer

    if _provider is not None:
        return _tracer

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    exporters = _exporters(otlp_endpoint, console_export)
    for exporter in exporters.values():
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _provider = provider
    _tracer = provider.get_tracer("tablediff")

    logger.debug(f"Tracing initialized for {service_name}, exporters: {', '.join(exporters) or 'none'}")
    return _tracer


def get_tracer() -> trace.Tracer:
    return _tracer if _tracer is not None else initialize_tracing()


def shutdown_tracing() -> None:
    """Flush and release the provider; a later get_tracer() starts a new one."""
    global _provider, _tracer

    provider, _provider, _tracer = _provider, None, None
    if provider is not None:
        provider.shutdown()
