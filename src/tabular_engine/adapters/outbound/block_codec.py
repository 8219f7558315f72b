"""Streaming block codec.

Splits a byte stream into fixed-size blocks and compresses each block
independently with zstandard. Blocks are compressed in parallel and written
strictly in input order; decoding is sequential.

Container Format:
    - Header (16 bytes): magic (8), version (4), block_size (4)
    - Frames: [compressed_len(4) + raw_len(4) + crc32(4) + compressed bytes] ...
    - End frame: 12 zero bytes

``crc32`` covers the raw (uncompressed) block. All integers are big-endian.
"""

from __future__ import annotations

import struct
import threading
import zlib
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import BinaryIO

import zstandard as zstd

from tabular_engine.infrastructure.logging import get_logger
from tabular_engine.ports.inbound.errors import ConfigurationError, CorruptStreamError

logger = get_logger(__name__)


CONTAINER_MAGIC = b"TABZBLK\x00"
CONTAINER_VERSION = 1
CONTAINER_HEADER_FORMAT = ">8sII"  # magic, version, block_size
CONTAINER_HEADER_SIZE = struct.calcsize(CONTAINER_HEADER_FORMAT)

FRAME_HEADER_FORMAT = ">III"  # compressed_len, raw_len, crc32
FRAME_HEADER_SIZE = struct.calcsize(FRAME_HEADER_FORMAT)
END_FRAME = bytes(FRAME_HEADER_SIZE)

MIN_BLOCK_SIZE = 64 * 1024
MAX_BLOCK_SIZE = 256 * 1024 * 1024
DEFAULT_BLOCK_SIZE = 256 * 1024
CHECK_PREFIX_SIZE = 64


@dataclass(frozen=True)
class CodecStats:
    """Byte counts of one compression run."""

    raw_bytes: int
    compressed_bytes: int
    blocks: int

    @property
    def ratio(self) -> float:
        """Raw to compressed size ratio (0.0 for empty input)."""
        if self.compressed_bytes == 0 or self.raw_bytes == 0:
            return 0.0
        return self.raw_bytes / self.compressed_bytes


class _DiscardSink:
    """Writable that drops everything."""

    def write(self, data: bytes) -> int:
        return len(data)

    def flush(self) -> None:
        pass


class BlockCodec:
    """Block-parallel zstandard compressor and sequential decompressor.

    Example:
        >>> codec = BlockCodec(level=3)
        >>> with open("data.csv", "rb") as src, open("data.csv.zblk", "wb") as dst:
        ...     stats = codec.compress(src, dst, jobs=4)
    """

    def __init__(self, level: int = 3, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        self._level = level
        self._block_size = block_size
        self._local = threading.local()

    @staticmethod
    def effective_block_size(block_size: int) -> int:
        """Raise undersized blocks to the format minimum.

        Raises:
            ConfigurationError: If the block size exceeds the format maximum.
        """
        if block_size > MAX_BLOCK_SIZE:
            raise ConfigurationError(
                f"block size {block_size} exceeds the maximum of {MAX_BLOCK_SIZE}"
            )
        return max(block_size, MIN_BLOCK_SIZE)

    def compress(
        self,
        src: BinaryIO,
        dst: BinaryIO,
        jobs: int = 1,
        block_size: int | None = None,
    ) -> CodecStats:
        """Compress ``src`` into a block container written to ``dst``.

        At most ``2 * jobs`` blocks are held in memory at any time.
        """
        size = self.effective_block_size(block_size or self._block_size)
        jobs = max(jobs, 1)
        dst.write(struct.pack(CONTAINER_HEADER_FORMAT, CONTAINER_MAGIC, CONTAINER_VERSION, size))

        raw_bytes = 0
        compressed_bytes = CONTAINER_HEADER_SIZE
        blocks = 0
        in_flight: deque[Future[bytes]] = deque()

        def drain_one() -> None:
            nonlocal compressed_bytes, blocks
            frame = in_flight.popleft().result()
            dst.write(frame)
            compressed_bytes += len(frame)
            blocks += 1

        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="blockcodec") as pool:
            while True:
                block = src.read(size)
                if not block:
                    break
                raw_bytes += len(block)
                in_flight.append(pool.submit(self._encode_frame, block))
                if len(in_flight) >= 2 * jobs:
                    drain_one()
            while in_flight:
                drain_one()

        dst.write(END_FRAME)
        compressed_bytes += FRAME_HEADER_SIZE
        dst.flush()

        stats = CodecStats(raw_bytes=raw_bytes, compressed_bytes=compressed_bytes, blocks=blocks)
        logger.info(
            "codec_compressed",
            raw_bytes=raw_bytes,
            compressed_bytes=compressed_bytes,
            blocks=blocks,
            ratio=round(stats.ratio, 3),
            jobs=jobs,
        )
        return stats

    def decompress(self, src: BinaryIO, dst: BinaryIO) -> int:
        """Decode a block container; returns the number of raw bytes written.

        Raises:
            CorruptStreamError: On a bad header, truncated frame, decode
                failure or checksum mismatch.
        """
        block_size = self._read_container_header(src)
        decompressor = zstd.ZstdDecompressor()
        produced = 0

        while True:
            header = src.read(FRAME_HEADER_SIZE)
            if len(header) < FRAME_HEADER_SIZE:
                raise CorruptStreamError("truncated stream: missing end frame", produced)
            if header == END_FRAME:
                break

            compressed_len, raw_len, crc = struct.unpack(FRAME_HEADER_FORMAT, header)
            if raw_len == 0 or raw_len > block_size or compressed_len == 0:
                raise CorruptStreamError(
                    f"invalid frame header (compressed {compressed_len}, raw {raw_len})",
                    produced,
                )

            payload = src.read(compressed_len)
            if len(payload) < compressed_len:
                raise CorruptStreamError("truncated frame payload", produced)

            try:
                raw = decompressor.decompress(payload, max_output_size=raw_len)
            except zstd.ZstdError as e:
                raise CorruptStreamError(f"block decode failed: {e}", produced) from e

            if len(raw) != raw_len:
                raise CorruptStreamError(
                    f"block length mismatch: expected {raw_len}, got {len(raw)}", produced
                )
            if zlib.crc32(raw) & 0xFFFFFFFF != crc:
                raise CorruptStreamError("block checksum mismatch", produced)

            dst.write(raw)
            produced += raw_len

        dst.flush()
        return produced

    def validate(self, src: BinaryIO) -> int:
        """Decode everything without keeping it; returns the raw size."""
        return self.decompress(src, _DiscardSink())  # type: ignore[arg-type]

    @staticmethod
    def check(src: BinaryIO, prefix_size: int = CHECK_PREFIX_SIZE) -> bool:
        """Cheap format probe over a short prefix of ``src``.

        Confirms the container header and, if the prefix reaches it, the
        first frame header. Does not decode anything.
        """
        data = src.read(prefix_size)
        if len(data) < CONTAINER_HEADER_SIZE:
            return False

        magic, version, block_size = struct.unpack(
            CONTAINER_HEADER_FORMAT, data[:CONTAINER_HEADER_SIZE]
        )
        if magic != CONTAINER_MAGIC or version != CONTAINER_VERSION:
            return False
        if not MIN_BLOCK_SIZE <= block_size <= MAX_BLOCK_SIZE:
            return False

        frame = data[CONTAINER_HEADER_SIZE : CONTAINER_HEADER_SIZE + FRAME_HEADER_SIZE]
        if len(frame) < FRAME_HEADER_SIZE or frame == END_FRAME:
            return True
        compressed_len, raw_len, _ = struct.unpack(FRAME_HEADER_FORMAT, frame)
        return compressed_len > 0 and 0 < raw_len <= block_size

    def _encode_frame(self, block: bytes) -> bytes:
        compressor = getattr(self._local, "compressor", None)
        if compressor is None:
            compressor = zstd.ZstdCompressor(level=self._level)
            self._local.compressor = compressor
        payload = compressor.compress(block)
        header = struct.pack(
            FRAME_HEADER_FORMAT, len(payload), len(block), zlib.crc32(block) & 0xFFFFFFFF
        )
        return header + payload

    @staticmethod
    def _read_container_header(src: BinaryIO) -> int:
        data = src.read(CONTAINER_HEADER_SIZE)
        if len(data) < CONTAINER_HEADER_SIZE:
            raise CorruptStreamError("truncated container header", 0)
        magic, version, block_size = struct.unpack(CONTAINER_HEADER_FORMAT, data)
        if magic != CONTAINER_MAGIC:
            raise CorruptStreamError(f"invalid container magic: {magic!r}", 0)
        if version != CONTAINER_VERSION:
            raise CorruptStreamError(f"unsupported container version: {version}", 0)
        if not MIN_BLOCK_SIZE <= block_size <= MAX_BLOCK_SIZE:
            raise CorruptStreamError(f"invalid block size: {block_size}", 0)
        return block_size
