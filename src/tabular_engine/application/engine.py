"""Tabular Engine - entry point for every record operator.

The facade resolves options against configuration, opens sources and sinks,
picks execution strategies, and wraps each operator in a trace span, timing
metrics and error logging. Operators themselves live in the domain layer.

Usage:
    from tabular_engine.application import TabularEngine, DedupOptions

    engine = TabularEngine()
    engine.create_index("events.csv")
    result = engine.dedup(DedupOptions(input="events.csv", select="1", sorted=True,
                                       output="unique.csv"))
    print(result.unique_count, result.dupe_count)
"""

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import time
from contextlib import ExitStack, contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterator

from tabular_engine.adapters.outbound.block_codec import BlockCodec, CodecStats
from tabular_engine.adapters.outbound.delimited import DelimitedReader, open_reader, open_writer
from tabular_engine.adapters.outbound.index_file import (
    FileOffsetIndex,
    IndexedReader,
    default_index_path,
    open_indexed,
)
from tabular_engine.adapters.outbound.mapped_view import MappedView
from tabular_engine.adapters.outbound.streams import (
    Location,
    is_stdio,
    open_binary_input,
    open_binary_output,
)
from tabular_engine.application.options import (
    CodecOptions,
    DedupOptions,
    SliceOptions,
    SortCheckOptions,
    SourceOptions,
    TransposeOptions,
)
from tabular_engine.domain.entities import ByteRecord
from tabular_engine.domain.services import (
    Abort,
    DedupResult,
    DuplicateEliminator,
    MemoryDecision,
    MemoryPolicyGate,
    RangeSlicer,
    RecordComparator,
    SortCheckReport,
    SortednessVerifier,
    TransposeEngine,
    io_reserved_jobs,
    njobs,
)
from tabular_engine.domain.value_objects import (
    ComparisonMode,
    DedupMode,
    Dialect,
    RowRange,
    Selection,
    TransposeStrategy,
)
from tabular_engine.infrastructure.config import Config, get_config
from tabular_engine.infrastructure.logging import ensure_logging, get_logger, operator_context
from tabular_engine.infrastructure.metrics import MetricsRegistry, get_metrics
from tabular_engine.infrastructure.tracing import annotate, trace_span
from tabular_engine.ports.inbound.errors import ConfigurationError, IndexUnavailableError

logger = get_logger(__name__)


class TabularEngine:
    """Out-of-core operators over delimited record files.

    Every operator is synchronous and owns any worker pool it starts.
    Errors derive from TabularEngineError and are logged before they
    propagate; OSError passes through unchanged.
    """

    def __init__(
        self,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
        memory_gate: MemoryPolicyGate | None = None,
        codec: BlockCodec | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Configuration (default: environment-derived global config).
            metrics: Metrics registry (default: global registry).
            memory_gate: Memory policy gate (default: built from config).
            codec: Block codec (default: built from config).
        """
        self._config = config or get_config()
        ensure_logging(
            self._config.observability.log_level, self._config.observability.log_format
        )
        self._metrics = metrics or get_metrics()
        self._gate = memory_gate or MemoryPolicyGate(
            safety_factor=self._config.memory.safety_factor,
            headroom_pct=self._config.memory.headroom_pct,
            always_check=self._config.memory.always_check,
        )
        self._codec = codec or BlockCodec(
            level=self._config.codec.level,
            block_size=self._config.codec.block_size,
        )

    @property
    def config(self) -> Config:
        return self._config

    # =========================================================================
    # Index and inspection
    # =========================================================================

    def create_index(
        self,
        input: Location,
        delimiter: str | None = None,
        no_headers: bool = False,
        index_path: str | Path | None = None,
    ) -> int:
        """Build the random-access index of a file.

        Returns:
            Logical record count of the indexed source.

        Raises:
            ConfigurationError: For standard input or a compressed container.
        """
        with self._operator("index", input=str(input)):
            if is_stdio(input):
                raise ConfigurationError("cannot create an index for standard input")
            if self._is_container(input):
                raise ConfigurationError(f"cannot index a compressed container: {input}")

            dialect = self._dialect(delimiter, no_headers, input)
            entries = FileOffsetIndex.create(
                input,
                dialect,
                index_path=index_path or self._index_path(input),
                buffer_size=self._config.io.read_buffer_size,
            )
            self._metrics.index_builds_total.inc()
            if dialect.has_headers and entries > 0:
                return entries - 1
            return entries

    def count(self, options: SourceOptions) -> int:
        """Number of data records, from the index when one is usable."""
        with self._operator("count", input=str(options.input)):
            with self._prepared_input(options.input) as source:
                dialect = self._source_dialect(options, source)
                if not is_stdio(source) and not self._is_container(options.input):
                    try:
                        with FileOffsetIndex.open(self._index_path(source)) as index:
                            return index.logical_count(dialect.has_headers)
                    except IndexUnavailableError as e:
                        logger.debug("index_unavailable", input=str(source), reason=str(e))
                return self._scan_count(source, dialect)

    def headers(self, options: SourceOptions) -> ByteRecord:
        """Header record (first record when headerless; empty for empty input)."""
        with self._prepared_input(options.input) as source:
            dialect = self._source_dialect(options, source)
            with self._open_reader(source, dialect) as reader:
                return reader.byte_headers()

    def records(self, options: SourceOptions, include_headers: bool = False) -> Iterator[ByteRecord]:
        """Iterate over data records, optionally preceded by the header."""
        with self._prepared_input(options.input) as source:
            dialect = self._source_dialect(options, source)
            with self._open_reader(source, dialect) as reader:
                headers = reader.byte_headers()
                if include_headers and dialect.has_headers and headers:
                    yield headers
                yield from reader.records()

    # =========================================================================
    # Record operators
    # =========================================================================

    def dedup(self, options: DedupOptions) -> DedupResult:
        """Remove records equal on the selected fields.

        Sorted mode streams; unsorted mode loads and sorts the whole input,
        so its output follows sorted order.

        Raises:
            ConfigurationError: On a bad selection or conflicting flags.
            OrderViolationError: Sorted mode found out-of-order input.
            InsufficientMemoryError: Unsorted mode input judged too large.
        """
        mode = DedupMode.from_flag(options.sorted)

        with self._operator("dedup", input=str(options.input), mode=mode.value) as span:
            compare_mode = ComparisonMode.from_flags(options.numeric, options.ignore_case)
            with self._prepared_input(options.input) as source:
                if mode is DedupMode.UNSORTED and not is_stdio(source):
                    self._require_memory(source, options.memcheck)

                dialect = self._source_dialect(options, source)
                with self._open_reader(source, dialect) as reader:
                    headers = reader.byte_headers()
                    comparator = None
                    if headers:
                        selection = Selection.resolve(options.select, headers, dialect.has_headers)
                        comparator = RecordComparator(compare_mode, selection)

                    with ExitStack() as stack:
                        out = stack.enter_context(self._open_writer(options.output))
                        dupes = None
                        if options.dupes_output is not None:
                            dupes = stack.enter_context(self._open_writer(options.dupes_output))

                        if comparator is None:
                            result = DedupResult(unique_count=0, dupe_count=0)
                        else:
                            if dialect.has_headers:
                                out.write_record(headers)
                                if dupes is not None:
                                    dupes.write_record(headers)
                            eliminator = DuplicateEliminator(
                                comparator,
                                jobs=njobs(options.jobs, self._config.parallelism.max_jobs),
                                chunk_min=self._config.parallelism.sort_chunk_min,
                            )
                            result = eliminator.run(mode, reader.records(), out, dupes)

            self._metrics.records_read_total.labels(operator="dedup").inc(result.record_count)
            self._metrics.records_written_total.labels(operator="dedup").inc(result.unique_count)
            self._metrics.duplicates_total.labels(operator="dedup").inc(result.dupe_count)
            annotate(span, unique=result.unique_count, duplicates=result.dupe_count)
            logger.info(
                "dedup_complete",
                mode=mode.value,
                unique=result.unique_count,
                duplicates=result.dupe_count,
            )
            return result

    def sortcheck(self, options: SortCheckOptions) -> SortCheckReport:
        """Report whether the input is sorted on the selected fields."""
        with self._operator(
            "sortcheck", input=str(options.input), exhaustive=options.all
        ) as span:
            compare_mode = ComparisonMode.from_flags(options.numeric, options.ignore_case)
            with self._prepared_input(options.input) as source:
                dialect = self._source_dialect(options, source)
                with self._open_reader(source, dialect) as reader:
                    headers = reader.byte_headers()
                    if not headers:
                        report = SortCheckReport(
                            sorted=True, record_count=0, unsorted_breaks=0, dupe_count=0
                        )
                    else:
                        selection = Selection.resolve(options.select, headers, dialect.has_headers)
                        verifier = SortednessVerifier(RecordComparator(compare_mode, selection))
                        report = verifier.verify(reader.records(), exhaustive=options.all)

            self._metrics.records_read_total.labels(operator="sortcheck").inc(report.record_count)
            self._metrics.duplicates_total.labels(operator="sortcheck").inc(report.dupe_count)
            annotate(span, sorted=report.sorted, records=report.record_count)
            logger.info(
                "sortcheck_complete",
                sorted=report.sorted,
                records=report.record_count,
                breaks=report.unsorted_breaks,
            )
            return report

    def transpose(self, options: TransposeOptions) -> int:
        """Swap rows and columns; returns the number of output rows.

        Raises:
            ConfigurationError: MULTIPASS requested for standard input.
            InsufficientMemoryError: IN_MEMORY requested and judged too large.
        """
        with self._operator("transpose", input=str(options.input)) as span:
            with self._prepared_input(options.input) as source:
                strategy = self._transpose_strategy(options, source)
                annotate(span, strategy=strategy.value)

                # width comes from the first record, header or not
                dialect = self._source_dialect(replace(options, no_headers=True), source)
                with ExitStack() as stack:
                    if strategy is TransposeStrategy.MULTIPASS:
                        view = stack.enter_context(MappedView(source))
                        opener = view.open_records(dialect)
                    else:
                        opener = stack.enter_context(self._open_reader(source, dialect)).records
                    out = stack.enter_context(self._open_writer(options.output))
                    rows = TransposeEngine().run(strategy, opener, out)

            self._metrics.records_written_total.labels(operator="transpose").inc(rows)
            logger.info("transpose_complete", strategy=strategy.value, rows=rows)
            return rows

    def slice(self, options: SliceOptions) -> int:
        """Write a range of records (or its complement); returns records written.

        Uses the index when one is usable, a linear scan otherwise.

        Raises:
            ConfigurationError: On conflicting range parameters.
            IndexUnavailableError: ``require_index`` set and the index is unusable.
        """
        from_end = (options.start is not None and options.start < 0) or (
            options.index is not None and options.index < 0
        )

        with self._operator("slice", input=str(options.input), invert=options.invert) as span:
            if options.require_index and is_stdio(options.input):
                raise ConfigurationError("indexed slicing needs a file, not standard input")

            with self._prepared_input(options.input, spool_stdin=from_end) as source:
                dialect = self._source_dialect(options, source)
                with ExitStack() as stack:
                    indexed = self._open_indexed(stack, source, dialect, options)

                    if indexed is not None:
                        row_range = self._row_range(options, indexed.count)
                        headers = indexed.byte_headers()
                    else:
                        row_range = self._row_range(
                            options, lambda: self._scan_count(source, dialect)
                        )
                        reader = stack.enter_context(self._open_reader(source, dialect))
                        headers = reader.byte_headers()

                    slicer = RangeSlicer(row_range, invert=options.invert)
                    with self._open_writer(options.output) as out:
                        if dialect.has_headers and headers:
                            out.write_record(headers)
                        if indexed is not None:
                            written = slicer.indexed(indexed, out)
                        else:
                            written = slicer.linear(reader.records(), out)

            self._metrics.records_written_total.labels(operator="slice").inc(written)
            annotate(span, indexed=indexed is not None, written=written)
            logger.info(
                "slice_complete",
                start=row_range.start,
                end=row_range.end,
                invert=options.invert,
                indexed=indexed is not None,
                written=written,
            )
            return written

    # =========================================================================
    # Block codec
    # =========================================================================

    def compress(self, options: CodecOptions) -> CodecStats:
        """Compress a byte stream into a block container."""
        jobs = io_reserved_jobs(njobs(options.jobs, self._config.parallelism.max_jobs))
        with self._operator("compress", input=str(options.input), jobs=jobs) as span:
            with open_binary_input(options.input, self._config.io.read_buffer_size) as src:
                with open_binary_output(options.output, self._config.io.write_buffer_size) as dst:
                    stats = self._codec.compress(src, dst, jobs=jobs, block_size=options.block_size)
            annotate(span, raw_bytes=stats.raw_bytes, blocks=stats.blocks)
            self._metrics.codec_bytes_total.labels(direction="raw_in").inc(stats.raw_bytes)
            self._metrics.codec_bytes_total.labels(direction="compressed_out").inc(
                stats.compressed_bytes
            )
            return stats

    def decompress(self, options: CodecOptions) -> int:
        """Decode a block container; returns decompressed bytes.

        Raises:
            CorruptStreamError: If the container is damaged.
        """
        with self._operator("decompress", input=str(options.input)):
            with open_binary_input(options.input, self._config.io.read_buffer_size) as src:
                with open_binary_output(options.output, self._config.io.write_buffer_size) as dst:
                    produced = self._codec.decompress(src, dst)
            self._metrics.codec_bytes_total.labels(direction="raw_out").inc(produced)
            return produced

    def check(self, input: Location) -> bool:
        """Whether the input looks like a block container (prefix probe only)."""
        with self._operator("check", input=str(input)) as span:
            with open_binary_input(input) as src:
                is_container = self._codec.check(src, self._config.codec.check_prefix)
            annotate(span, container=is_container)
            return is_container

    def validate(self, input: Location) -> int:
        """Fully decode the input without writing it; returns decompressed bytes."""
        with self._operator("validate", input=str(input)):
            with open_binary_input(input, self._config.io.read_buffer_size) as src:
                return self._codec.validate(src)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @contextmanager
    def _operator(self, name: str, **attributes: Any) -> Iterator[Any]:
        """Trace, time and count one operator run; log failures and re-raise."""
        start = time.perf_counter()
        with operator_context(name, input=attributes.get("input")):
            with trace_span(f"tabular_engine.{name}", attributes) as span:
                try:
                    yield span
                except Exception as e:
                    self._metrics.operator_runs_total.labels(operator=name, status="error").inc()
                    logger.error(
                        "operator_failed",
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise
                else:
                    self._metrics.operator_runs_total.labels(
                        operator=name, status="success"
                    ).inc()
                finally:
                    self._metrics.operator_duration_seconds.labels(operator=name).observe(
                        time.perf_counter() - start
                    )

    @contextmanager
    def _prepared_input(self, location: Location, spool_stdin: bool = False) -> Iterator[Location]:
        """Materialize inputs that operators cannot read directly.

        Containers are decompressed to a temporary file. Standard input is
        copied to one when ``spool_stdin`` is set. Temporary files are removed
        on exit.
        """
        if is_stdio(location) and not spool_stdin:
            yield location
            return
        if not is_stdio(location) and not self._is_container(location):
            yield location
            return

        suffix = Path(self._logical_name(location)).suffix if location is not None else ""
        fd, tmp_name = tempfile.mkstemp(prefix="tabular_engine_", suffix=suffix)
        try:
            with os.fdopen(fd, "wb") as tmp:
                if is_stdio(location):
                    shutil.copyfileobj(sys.stdin.buffer, tmp)
                else:
                    with open(location, "rb") as src:
                        produced = self._codec.decompress(src, tmp)
                    logger.debug("container_expanded", input=str(location), bytes=produced)
            yield tmp_name
        finally:
            Path(tmp_name).unlink(missing_ok=True)

    def _is_container(self, location: Location) -> bool:
        return not is_stdio(location) and str(location).endswith(self._config.codec.extension)

    def _logical_name(self, location: Location) -> str:
        name = str(location)
        extension = self._config.codec.extension
        return name[: -len(extension)] if name.endswith(extension) else name

    def _index_path(self, source: Location) -> Path:
        return default_index_path(str(source), self._config.io.index_suffix)

    def _dialect(self, delimiter: str | None, no_headers: bool, location: Location) -> Dialect:
        path = None if is_stdio(location) else self._logical_name(location)
        return Dialect.resolve(
            delimiter, no_headers=no_headers, path=path, default=self._config.io.delimiter
        )

    def _source_dialect(self, options: SourceOptions, source: Location) -> Dialect:
        # dialect follows the name the caller gave, not a temporary copy
        return self._dialect(options.delimiter, options.no_headers, options.input)

    def _output_dialect(self, location: Location) -> Dialect:
        return self._dialect(None, False, location)

    @contextmanager
    def _open_reader(self, source: Location, dialect: Dialect) -> Iterator[DelimitedReader]:
        with open_reader(source, dialect, self._config.io.read_buffer_size) as reader:
            yield reader

    def _open_writer(self, location: Location) -> Any:
        return open_writer(
            location, self._output_dialect(location), self._config.io.write_buffer_size
        )

    def _open_indexed(
        self,
        stack: ExitStack,
        source: Location,
        dialect: Dialect,
        options: SliceOptions,
    ) -> IndexedReader | None:
        if is_stdio(source) or self._is_container(options.input):
            if options.require_index:
                raise ConfigurationError("indexed slicing needs an uncompressed file")
            return None
        index_path = options.index_path or self._index_path(source)
        try:
            return stack.enter_context(
                open_indexed(source, dialect, index_path, self._config.io.read_buffer_size)
            )
        except IndexUnavailableError as e:
            if options.require_index:
                raise
            logger.debug("index_unavailable", input=str(source), reason=str(e))
            return None

    def _scan_count(self, source: Location, dialect: Dialect) -> int:
        with self._open_reader(source, dialect) as reader:
            reader.byte_headers()
            return reader.count_records()

    @staticmethod
    def _row_range(options: SliceOptions, row_count: Any) -> RowRange:
        return RowRange.resolve(
            start=options.start,
            end=options.end,
            length=options.length,
            index=options.index,
            row_count=row_count,
        )

    def _require_memory(self, source: Location, force_check: bool) -> None:
        decision = self._decide_memory(source, force_check)
        if isinstance(decision, Abort):
            raise decision.to_error()

    def _decide_memory(self, source: Location, force_check: bool) -> MemoryDecision:
        decision = self._gate.decide_for_path(source, force_check)
        label = "abort" if isinstance(decision, Abort) else "proceed"
        self._metrics.memory_gate_decisions_total.labels(decision=label).inc()
        return decision

    def _transpose_strategy(self, options: TransposeOptions, source: Location) -> TransposeStrategy:
        strategy = options.strategy
        if is_stdio(source):
            if strategy is TransposeStrategy.MULTIPASS:
                raise ConfigurationError("multipass transpose cannot read standard input")
            return TransposeStrategy.IN_MEMORY
        if strategy is TransposeStrategy.MULTIPASS:
            return strategy

        decision = self._decide_memory(source, options.memcheck)
        if isinstance(decision, Abort):
            if strategy is TransposeStrategy.IN_MEMORY:
                raise decision.to_error()
            logger.warning(
                "transpose_multipass_fallback",
                input=str(source),
                required_bytes=decision.required_bytes,
                available_bytes=decision.available_bytes,
            )
            return TransposeStrategy.MULTIPASS
        return TransposeStrategy.IN_MEMORY
