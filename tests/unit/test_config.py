"""Unit tests for configuration module."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tabular_engine.infrastructure.config import (
    CodecConfig,
    Config,
    IOConfig,
    MemoryConfig,
    get_config,
)


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.io.delimiter == ","
        assert config.io.index_suffix == ".idx"
        assert config.memory.safety_factor == 20.0
        assert config.memory.headroom_pct == 20
        assert config.memory.always_check is False
        assert config.parallelism.max_jobs is None
        assert config.codec.block_size == 262144
        assert config.codec.extension == ".zblk"
        assert config.codec.check_prefix == 64
        assert config.observability.log_format == "json"

    def test_env_override_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested sections are read from prefixed environment variables."""
        monkeypatch.setenv("TABULAR_ENGINE_MEMORY__HEADROOM_PCT", "0")
        monkeypatch.setenv("TABULAR_ENGINE_PARALLELISM__MAX_JOBS", "3")

        config = Config()

        assert config.memory.headroom_pct == 0
        assert config.parallelism.max_jobs == 3

    def test_tab_delimiter_escape(self) -> None:
        """A literal backslash-t means tab."""
        assert IOConfig(delimiter=r"\t").delimiter == "\t"

    def test_multi_byte_delimiter_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IOConfig(delimiter=";;")

    def test_non_latin1_delimiter_rejected(self) -> None:
        with pytest.raises(ValidationError, match="single byte"):
            IOConfig(delimiter="\u20ac")

    def test_latin1_delimiter_accepted(self) -> None:
        assert IOConfig(delimiter="\u00a7").delimiter == "\u00a7"

    def test_headroom_bounds(self) -> None:
        with pytest.raises(ValidationError):
            MemoryConfig(headroom_pct=101)

    def test_codec_level_bounds(self) -> None:
        with pytest.raises(ValidationError):
            CodecConfig(level=0)

    def test_get_config_cached(self) -> None:
        """get_config returns one shared instance."""
        get_config.cache_clear()
        try:
            assert get_config() is get_config()
        finally:
            get_config.cache_clear()
