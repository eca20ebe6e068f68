"""Shared typed models.

This module defines immutable data models used by the ingest, store,
and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceRow:
    """Raw delimited row read from a source file.

    Attributes:
        source_path: File the row was read from.
        line_number: One-based physical line number of the row.
        fields: Ordered raw text fields.
    """

    source_path: str
    line_number: int
    fields: tuple[str, ...]

    @property
    def location(self) -> str:
        """Return ``path:line`` for log and error context."""
        return f"{self.source_path}:{self.line_number}"


@dataclass(frozen=True)
class WeatherMeasurement:
    """Normalized weather sensor measurement.

    Attributes:
        id: Source-provided measurement identifier, used as document id.
        timestamp: ISO-8601 instant of the measurement.
        temperature_celsius: Air temperature in Celsius.
        temperature_fahrenheit: Air temperature in Fahrenheit, truncated.
        humidity_percentage: Relative humidity in whole percent.
        rain_intensity_mm_per_hour: Rain intensity in millimeters per hour.
        rain_intensity_inches_per_hour: Rain intensity in inches per hour.
        rain_since_last_hour_mm: Interval rain in millimeters.
        rain_since_last_hour_inches: Interval rain in inches.
        precipitation_type: Sensor precipitation type code.
    """

    id: str
    timestamp: str
    temperature_celsius: float
    temperature_fahrenheit: int
    humidity_percentage: int
    rain_intensity_mm_per_hour: float
    rain_intensity_inches_per_hour: float
    rain_since_last_hour_mm: float
    rain_since_last_hour_inches: float
    precipitation_type: int


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one committed bulk batch.

    Attributes:
        batch_id: One-based sequence number of the batch.
        operation_count: Create operations sent in the batch.
        created: Documents created by the index.
        duplicates: Operations rejected because the id already exists.
        failures: Item failures other than duplicates.
    """

    batch_id: int
    operation_count: int
    created: int
    duplicates: int
    failures: int = 0

    @property
    def succeeded(self) -> bool:
        """Return whether every non-duplicate item was accepted."""
        return self.failures == 0


@dataclass(frozen=True)
class LoadSummary:
    """Counters for one completed load run.

    Attributes:
        files: Source files processed.
        rows_read: Data and header rows read.
        header_rows: Header rows skipped.
        documents_enqueued: Create operations handed to the submitter.
        batches: Bulk batches committed.
        created: Documents created by the index.
        duplicates: Documents skipped because their id already existed.
    """

    files: int
    rows_read: int
    header_rows: int
    documents_enqueued: int
    batches: int
    created: int
    duplicates: int
