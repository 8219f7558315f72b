"""Infrastructure layer - cross-cutting concerns."""

from tabular_engine.infrastructure.config import Config, get_config
from tabular_engine.infrastructure.logging import (
    ensure_logging,
    get_logger,
    operator_context,
    setup_logging,
)
from tabular_engine.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from tabular_engine.infrastructure.tracing import (
    annotate,
    get_tracer,
    setup_tracing,
    setup_tracing_from_config,
    trace_span,
)

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "ensure_logging",
    "get_logger",
    "operator_context",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "setup_tracing_from_config",
    "get_tracer",
    "trace_span",
    "annotate",
]
