"""Configuration management for the tabular engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IOConfig(BaseModel):
    """Record I/O configuration."""

    delimiter: str = Field(default=",", description="Default field delimiter")
    read_buffer_size: int = Field(
        default=131072, ge=4096, description="Read buffer size in bytes (default 128KB)"
    )
    write_buffer_size: int = Field(
        default=262144, ge=4096, description="Write buffer size in bytes (default 256KB)"
    )
    index_suffix: str = Field(default=".idx", description="Suffix of side-car index files")

    @field_validator("delimiter")
    @classmethod
    def _single_byte_delimiter(cls, value: str) -> str:
        if value == r"\t":
            value = "\t"
        try:
            encoded = value.encode("latin-1")
        except UnicodeEncodeError:
            raise ValueError(f"delimiter must be a single byte, got {value!r}") from None
        if len(encoded) != 1:
            raise ValueError(f"delimiter must be a single byte, got {value!r}")
        return value


class MemoryConfig(BaseModel):
    """Memory policy gate configuration."""

    safety_factor: float = Field(
        default=20.0,
        gt=0.0,
        description="Multiplier from file size to in-memory footprint of parsed records",
    )
    headroom_pct: int = Field(
        default=20, ge=0, le=100, description="Percent of memory kept free (0 disables the gate)"
    )
    always_check: bool = Field(
        default=False, description="Run the memory check even when callers do not ask for it"
    )


class ParallelismConfig(BaseModel):
    """Worker pool sizing."""

    max_jobs: int | None = Field(
        default=None, ge=1, description="Upper bound on worker count (default: all CPUs)"
    )
    sort_chunk_min: int = Field(
        default=50000, ge=1, description="Minimum records per parallel sort chunk"
    )


class CodecConfig(BaseModel):
    """Block codec configuration."""

    block_size: int = Field(
        default=262144, ge=1, description="Uncompressed block size in bytes (default 256KB)"
    )
    level: int = Field(default=3, ge=1, le=22, description="zstd compression level")
    extension: str = Field(default=".zblk", description="Container file extension")
    check_prefix: int = Field(
        default=64, ge=16, le=4096, description="Bytes read by the cheap container check"
    )


class ObservabilityConfig(BaseModel):
    """Logging and tracing settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(
        default="tabular_engine", description="Service name for tracing"
    )


class Config(BaseSettings):
    """Main configuration for the tabular engine."""

    model_config = SettingsConfigDict(
        env_prefix="TABULAR_ENGINE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    io: IOConfig = Field(default_factory=IOConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    parallelism: ParallelismConfig = Field(default_factory=ParallelismConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Configuration read once from the environment and cached."""
    return Config()
