"""Unit tests for the streaming block codec."""

from __future__ import annotations

import io
import os
import struct

import pytest

from tabular_engine.adapters.outbound import CONTAINER_MAGIC, MIN_BLOCK_SIZE, BlockCodec
from tabular_engine.adapters.outbound.block_codec import (
    CONTAINER_HEADER_SIZE,
    END_FRAME,
    FRAME_HEADER_SIZE,
)
from tabular_engine.ports.inbound.errors import ConfigurationError, CorruptStreamError


def sample(size: int) -> bytes:
    rows = b"".join(b"%d,value-%d,%d\n" % (i, i % 97, i * 7) for i in range(size // 10 + 1))
    return rows[:size]


def compress(data: bytes, jobs: int = 2, block_size: int = MIN_BLOCK_SIZE) -> bytes:
    dst = io.BytesIO()
    BlockCodec().compress(io.BytesIO(data), dst, jobs=jobs, block_size=block_size)
    return dst.getvalue()


@pytest.mark.unit
class TestBlockCodec:
    """Tests for BlockCodec."""

    def test_round_trip_multiple_blocks(self) -> None:
        data = sample(5 * MIN_BLOCK_SIZE + 123)
        container = compress(data, jobs=3)

        out = io.BytesIO()
        produced = BlockCodec().decompress(io.BytesIO(container), out)

        assert out.getvalue() == data
        assert produced == len(data)

    def test_stats(self) -> None:
        data = sample(3 * MIN_BLOCK_SIZE)
        dst = io.BytesIO()
        stats = BlockCodec().compress(io.BytesIO(data), dst, jobs=2, block_size=MIN_BLOCK_SIZE)

        assert stats.raw_bytes == len(data)
        assert stats.blocks == 3
        assert stats.compressed_bytes == len(dst.getvalue())
        assert stats.ratio > 1.0

    def test_small_block_size_raised_to_minimum(self) -> None:
        container = compress(sample(1000), block_size=1024)
        _, _, block_size = struct.unpack(">8sII", container[:CONTAINER_HEADER_SIZE])
        assert block_size == MIN_BLOCK_SIZE

    def test_oversized_block_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            BlockCodec.effective_block_size(1 << 40)

    def test_empty_input(self) -> None:
        container = compress(b"")
        assert container[:8] == CONTAINER_MAGIC
        assert container[CONTAINER_HEADER_SIZE:] == END_FRAME
        assert BlockCodec().validate(io.BytesIO(container)) == 0

    def test_deterministic_across_job_counts(self) -> None:
        data = sample(4 * MIN_BLOCK_SIZE)
        assert compress(data, jobs=1) == compress(data, jobs=4)

    def test_check(self) -> None:
        data = sample(2 * MIN_BLOCK_SIZE)
        assert BlockCodec.check(io.BytesIO(compress(data))) is True
        assert BlockCodec.check(io.BytesIO(data)) is False
        assert BlockCodec.check(io.BytesIO(b"")) is False

    def test_check_reads_prefix_only(self) -> None:
        source = io.BytesIO(compress(sample(2 * MIN_BLOCK_SIZE)))
        BlockCodec.check(source)
        assert source.tell() <= 64

    def test_truncated_stream(self) -> None:
        data = sample(3 * MIN_BLOCK_SIZE)
        container = compress(data)

        with pytest.raises(CorruptStreamError) as exc_info:
            BlockCodec().validate(io.BytesIO(container[: len(container) // 2]))

        assert 0 < exc_info.value.bytes_decompressed < len(data)
        assert exc_info.value.bytes_decompressed % MIN_BLOCK_SIZE == 0

    def test_missing_end_frame(self) -> None:
        data = sample(MIN_BLOCK_SIZE)
        container = compress(data)[:-FRAME_HEADER_SIZE]
        with pytest.raises(CorruptStreamError, match="end frame") as exc_info:
            BlockCodec().validate(io.BytesIO(container))
        assert exc_info.value.bytes_decompressed == len(data)

    def test_checksum_mismatch(self) -> None:
        container = bytearray(compress(sample(1000)))
        crc_at = CONTAINER_HEADER_SIZE + 8
        container[crc_at] ^= 0xFF
        with pytest.raises(CorruptStreamError, match="checksum"):
            BlockCodec().validate(io.BytesIO(bytes(container)))

    def test_corrupt_payload(self) -> None:
        container = bytearray(compress(os.urandom(5000)))
        payload_at = CONTAINER_HEADER_SIZE + FRAME_HEADER_SIZE
        for i in range(payload_at, payload_at + 16):
            container[i] ^= 0x5A
        with pytest.raises(CorruptStreamError):
            BlockCodec().validate(io.BytesIO(bytes(container)))

    def test_not_a_container(self) -> None:
        with pytest.raises(CorruptStreamError, match="magic"):
            BlockCodec().decompress(io.BytesIO(b"id,name\n" * 10), io.BytesIO())
