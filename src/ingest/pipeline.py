"""Load orchestration for weather sensor files.

This module drives source rows through parsing, serialization, and
bulk submission, then flushes the submitter once all files are read.
A fatal error mid-run still flushes what was already enqueued before
the error is re-raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Protocol

from core.errors import WeatherLoaderError
from core.logging_config import get_logger
from core.types import BatchResult, LoadSummary, SourceRow, WeatherMeasurement
from ingest.csv_reader import iter_source_rows
from store.document_payload import measurement_to_document

_LOGGER = get_logger(__name__)


class MeasurementParser(Protocol):
    def parse(self, row: SourceRow) -> WeatherMeasurement | None:
        ...


class DocumentSubmitter(Protocol):
    def enqueue(self, doc_id: str, document: dict[str, Any]) -> None:
        ...

    def flush(self) -> list[BatchResult]:
        ...


@dataclass
class _LoadCounters:
    files: int = 0
    rows_read: int = 0
    header_rows: int = 0
    documents_enqueued: int = 0


class LoadPipeline:
    """Sequential producer feeding parsed measurements to a submitter."""

    def __init__(
        self,
        parser: MeasurementParser,
        submitter: DocumentSubmitter,
        row_reader: Callable[[Path], Iterator[SourceRow]] = iter_source_rows,
        logger: Any = None,
    ) -> None:
        self._parser = parser
        self._submitter = submitter
        self._row_reader = row_reader
        self._logger = logger or _LOGGER

    def run(self, source_paths: Iterable[Path]) -> LoadSummary:
        """Load every source file in order and flush once at the end.

        Args:
            source_paths: Ordered source CSV files.

        Returns:
            Counters for the completed run.

        Raises:
            WeatherLoaderError: On the first parse, read, or commit failure.
        """
        counters = _LoadCounters()
        try:
            for source_path in source_paths:
                self._load_file(Path(source_path), counters)
        except WeatherLoaderError as error:
            self._flush_before_abort(counters, error)
            raise
        results = self._submitter.flush()
        summary = _build_summary(counters, results)
        self._logger.info(
            "load_completed",
            files=summary.files,
            rows_read=summary.rows_read,
            documents_enqueued=summary.documents_enqueued,
            batches=summary.batches,
            created=summary.created,
            duplicates=summary.duplicates,
        )
        return summary

    def _load_file(self, source_path: Path, counters: _LoadCounters) -> None:
        self._logger.info("file_parse_started", path=str(source_path))
        enqueued_before = counters.documents_enqueued
        for row in self._row_reader(source_path):
            counters.rows_read += 1
            measurement = self._parser.parse(row)
            if measurement is None:
                counters.header_rows += 1
                continue
            document = measurement_to_document(measurement)
            self._submitter.enqueue(measurement.id, document)
            counters.documents_enqueued += 1
        counters.files += 1
        self._logger.info(
            "file_parse_completed",
            path=str(source_path),
            documents_enqueued=counters.documents_enqueued - enqueued_before,
        )

    def _flush_before_abort(self, counters: _LoadCounters, cause: WeatherLoaderError) -> None:
        """Commit already-enqueued operations before a fatal abort.

        A flush failure other than ``cause`` itself is logged; ``cause`` is
        re-raised by the caller either way.
        """
        if counters.documents_enqueued == 0:
            return
        self._logger.warning(
            "load_aborting_flush",
            documents_enqueued=counters.documents_enqueued,
        )
        try:
            self._submitter.flush()
        except WeatherLoaderError as error:
            if error is not cause:
                self._logger.error("load_abort_flush_failed", error=str(error))


def _build_summary(counters: _LoadCounters, results: list[BatchResult]) -> LoadSummary:
    return LoadSummary(
        files=counters.files,
        rows_read=counters.rows_read,
        header_rows=counters.header_rows,
        documents_enqueued=counters.documents_enqueued,
        batches=len(results),
        created=sum(result.created for result in results),
        duplicates=sum(result.duplicates for result in results),
    )
