"""OpenTelemetry tracing for operator runs.

Every operator runs inside one span named ``tabular_engine.<operator>``.
Parameters are attached when the span opens and result counts when the
operator finishes, all under the ``tabular.`` attribute namespace.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from tabular_engine.infrastructure.config import ObservabilityConfig

ATTRIBUTE_PREFIX = "tabular."

_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str = "tabular_engine",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """Install a tracer provider for operator spans and return its tracer.

    Spans are exported over OTLP/gRPC when ``otlp_endpoint`` is given
    (plaintext, e.g. ``http://localhost:4317``) and printed when
    ``console_export`` is set. With neither, spans are recorded but dropped.
    """
    global _tracer

    from tabular_engine import __version__

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
        }
    )

    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )

    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def setup_tracing_from_config(config: ObservabilityConfig) -> trace.Tracer:
    """Set up tracing from the observability section of the configuration."""
    return setup_tracing(
        service_name=config.otel_service_name,
        otlp_endpoint=config.otel_endpoint,
    )


def get_tracer() -> trace.Tracer:
    """Return the engine tracer, falling back to the globally installed provider."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("tabular_engine")
    return _tracer


def annotate(span: trace.Span, **values: Any) -> None:
    """Attach namespaced attributes to a span; None values are skipped."""
    for key, value in values.items():
        if value is None:
            continue
        if not isinstance(value, (bool, int, float, str)):
            value = str(value)
        span.set_attribute(f"{ATTRIBUTE_PREFIX}{key}", value)


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Run the block inside a current span carrying ``attributes`` via annotate()."""
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        annotate(span, **(attributes or {}))
        yield span
