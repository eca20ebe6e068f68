"""Weather loader exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
Every error is fatal to the run; the CLI maps them onto exit code 1.
"""

from __future__ import annotations


class WeatherLoaderError(Exception):
    """Base exception for all weather loader failures."""

    stage = "loader"


class ConfigError(WeatherLoaderError):
    """Raised for invalid runtime configuration."""

    stage = "config"


class SourceReadError(WeatherLoaderError):
    """Raised when a source CSV file cannot be opened or decoded."""

    stage = "read"


class FieldParseError(WeatherLoaderError):
    """Raised when one column of a source row cannot be parsed.

    Attributes:
        field_name: Name of the measurement field being parsed.
        raw_value: Offending raw text from the source row.
        location: Source location as ``path:line`` when known.
        record_id: Record id accepted before the failing field, if any.
    """

    stage = "parse"

    def __init__(
        self,
        message: str,
        *,
        field_name: str,
        raw_value: str,
        location: str | None = None,
        record_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.raw_value = raw_value
        self.location = location
        self.record_id = record_id


class RecordLayoutError(FieldParseError):
    """Raised when a row is too short to contain a required column."""


class TimezoneResolutionError(WeatherLoaderError):
    """Raised when the source timezone name cannot be resolved."""

    stage = "timestamp"


class TimestampFormatError(WeatherLoaderError):
    """Raised when a source date/time does not match the fixed layout."""

    stage = "timestamp"


class SerializationError(WeatherLoaderError):
    """Raised when a measurement cannot be encoded as a JSON document."""

    stage = "serialize"


class BatchCommitError(WeatherLoaderError):
    """Raised when a bulk batch fails to commit to the index."""

    stage = "bulk"

    def __init__(self, message: str, *, batch_id: int | None = None) -> None:
        super().__init__(message)
        self.batch_id = batch_id


class IndexAdminError(WeatherLoaderError):
    """Raised for index exists/create/delete failures."""

    stage = "index_admin"
