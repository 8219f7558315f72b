"""Pytest configuration and fixtures for tabular_engine tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from tabular_engine.domain.services import MemoryPolicyGate, MemorySnapshot
from tabular_engine.infrastructure.config import Config, IOConfig, MemoryConfig, ParallelismConfig
from tabular_engine.infrastructure.logging import setup_logging
from tabular_engine.infrastructure.metrics import MetricsRegistry


@pytest.fixture(autouse=True)
def stderr_logging() -> None:
    """Route logs to the current stderr so captured stdout holds only records."""
    setup_logging(level="DEBUG", log_format="console", cache_loggers=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Scratch directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_file(temp_dir: Path) -> Callable[[str, bytes], Path]:
    """Write bytes to a named file in the temporary directory."""

    def _write(name: str, data: bytes) -> Path:
        path = temp_dir / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def test_config() -> Config:
    """Provide a configuration with small sort chunks and a bounded pool."""
    return Config(
        io=IOConfig(read_buffer_size=4096, write_buffer_size=4096),
        memory=MemoryConfig(safety_factor=2.0, headroom_pct=20),
        parallelism=ParallelismConfig(max_jobs=2, sort_chunk_min=2),
    )


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    """Registry private to one test."""
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(collector_registry: CollectorRegistry) -> MetricsRegistry:
    """Engine metrics bound to the private registry."""
    return MetricsRegistry(registry=collector_registry)


@pytest.fixture
def fixed_memory() -> Callable[..., Callable[[], MemorySnapshot]]:
    """Factory of memory probes reporting fixed figures."""

    def _probe(available: int, free_swap: int = 0) -> Callable[[], MemorySnapshot]:
        return lambda: MemorySnapshot(available=available, free_swap=free_swap, total=available)

    return _probe


@pytest.fixture
def starved_gate(fixed_memory) -> MemoryPolicyGate:
    """Gate that refuses anything larger than a few bytes when checked."""
    return MemoryPolicyGate(safety_factor=2.0, headroom_pct=20, probe=fixed_memory(10))


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Register the test category markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
