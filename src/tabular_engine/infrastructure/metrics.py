"""Prometheus metrics for the tabular engine."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all tabular engine metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or REGISTRY

        # Operator metrics
        self.operator_runs_total = Counter(
            "tabular_operator_runs_total",
            "Total number of operator invocations",
            ["operator", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operator_duration_seconds = Histogram(
            "tabular_operator_duration_seconds",
            "Operator wall-clock duration in seconds",
            ["operator"],
            buckets=(0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0, 1800.0),
            registry=self._registry,
        )

        # Record metrics
        self.records_read_total = Counter(
            "tabular_records_read_total",
            "Total records read from sources",
            ["operator"],
            registry=self._registry,
        )

        self.records_written_total = Counter(
            "tabular_records_written_total",
            "Total records written to primary outputs",
            ["operator"],
            registry=self._registry,
        )

        self.duplicates_total = Counter(
            "tabular_duplicates_total",
            "Total duplicate records found",
            ["operator"],  # dedup, sortcheck
            registry=self._registry,
        )

        # Memory gate metrics
        self.memory_gate_decisions_total = Counter(
            "tabular_memory_gate_decisions_total",
            "Memory policy gate decisions",
            ["decision"],  # proceed, abort
            registry=self._registry,
        )

        # Index metrics
        self.index_builds_total = Counter(
            "tabular_index_builds_total",
            "Total random-access indexes created",
            registry=self._registry,
        )

        # Codec metrics
        self.codec_bytes_total = Counter(
            "tabular_codec_bytes_total",
            "Bytes processed by the block codec",
            ["direction"],  # raw_in, compressed_out, compressed_in, raw_out
            registry=self._registry,
        )

        self.info = Info(
            "tabular_engine",
            "Tabular engine information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """Install the process-wide engine metrics and expose them over HTTP on ``port``."""
    global _metrics
    _metrics = MetricsRegistry(registry)

    from tabular_engine import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Process-wide engine metrics, created on first use without an exposer."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
