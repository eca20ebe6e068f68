"""Weather sensor record parsing.

This module maps one raw CSV row at the fixed source column layout
onto a normalized ``WeatherMeasurement``. Fields are checked in a fixed
order and the first malformed field fails the whole run.
"""

from __future__ import annotations

import math
import re

from core.constants import (
    COLUMN_HUMIDITY,
    COLUMN_INTERVAL_RAIN,
    COLUMN_PRECIPITATION_TYPE,
    COLUMN_RAIN_INTENSITY,
    COLUMN_RECORD_ID,
    COLUMN_TEMPERATURE,
    COLUMN_TIMESTAMP,
    FLOAT32_MAX,
    HEADER_MARKER,
    INT32_MAX,
    INT32_MIN,
    MIN_COLUMN_COUNT,
)
from core.errors import FieldParseError, RecordLayoutError
from core.types import SourceRow, WeatherMeasurement
from ingest.timestamp import TimestampNormalizer, split_source_timestamp
from ingest.unit_conversion import celsius_to_fahrenheit, mm_to_inches, to_float32

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class RecordParser:
    """Parse source rows into weather measurements."""

    def __init__(
        self,
        timestamp_normalizer: TimestampNormalizer,
        header_marker: str = HEADER_MARKER,
    ) -> None:
        self._timestamps = timestamp_normalizer
        self._header_marker = header_marker

    def is_header(self, row: SourceRow) -> bool:
        """Return whether the row is the header row."""
        return bool(row.fields) and row.fields[0] == self._header_marker

    def parse(self, row: SourceRow) -> WeatherMeasurement | None:
        """Parse one source row.

        Args:
            row: Raw source row.

        Returns:
            Parsed measurement, or None for the header row.

        Raises:
            FieldParseError: If a column is missing or malformed.
            TimestampFormatError: If the measurement timestamp is malformed.
        """
        if self.is_header(row):
            return None
        _require_layout(row)
        fields = row.fields
        record_id = fields[COLUMN_RECORD_ID]
        if not record_id.strip():
            raise FieldParseError(
                f"Empty measurement id at {row.location}. Every data row needs an id.",
                field_name="id",
                raw_value=record_id,
                location=row.location,
            )
        date_text, time_text = split_source_timestamp(fields[COLUMN_TIMESTAMP])
        timestamp = self._timestamps.normalize(date_text, time_text)
        celsius = parse_float(row, COLUMN_TEMPERATURE, "temperature_celsius", record_id)
        fahrenheit = _derive_fahrenheit(row, celsius, record_id)
        humidity = parse_int32(row, COLUMN_HUMIDITY, "humidity_percentage", record_id)
        rain_intensity = parse_float(
            row, COLUMN_RAIN_INTENSITY, "rain_intensity_mm_per_hour", record_id
        )
        interval_rain = parse_float(
            row, COLUMN_INTERVAL_RAIN, "rain_since_last_hour_mm", record_id
        )
        precipitation_type = parse_int32(
            row, COLUMN_PRECIPITATION_TYPE, "precipitation_type", record_id
        )
        return WeatherMeasurement(
            id=record_id,
            timestamp=timestamp,
            temperature_celsius=to_float32(celsius),
            temperature_fahrenheit=fahrenheit,
            humidity_percentage=humidity,
            rain_intensity_mm_per_hour=to_float32(rain_intensity),
            rain_intensity_inches_per_hour=mm_to_inches(rain_intensity),
            rain_since_last_hour_mm=to_float32(interval_rain),
            rain_since_last_hour_inches=mm_to_inches(interval_rain),
            precipitation_type=precipitation_type,
        )


def parse_float(row: SourceRow, column: int, field_name: str, record_id: str) -> float:
    """Parse a finite decimal column.

    Raises:
        FieldParseError: If the text is not a finite decimal number.
    """
    raw_value = row.fields[column]
    if not _FLOAT_PATTERN.fullmatch(raw_value):
        raise _field_error(row, field_name, raw_value, record_id, "expected a decimal number")
    value = float(raw_value)
    if not math.isfinite(value):
        raise _field_error(row, field_name, raw_value, record_id, "value is out of range")
    if abs(value) > FLOAT32_MAX:
        raise _field_error(row, field_name, raw_value, record_id, "value exceeds 32-bit range")
    return value


def parse_int32(row: SourceRow, column: int, field_name: str, record_id: str) -> int:
    """Parse a base-10 whole-number column within the signed 32-bit range.

    Raises:
        FieldParseError: If the text is not a whole number or overflows.
    """
    raw_value = row.fields[column]
    if not _INTEGER_PATTERN.fullmatch(raw_value):
        raise _field_error(row, field_name, raw_value, record_id, "expected a whole number")
    value = int(raw_value, 10)
    if not INT32_MIN <= value <= INT32_MAX:
        raise _field_error(row, field_name, raw_value, record_id, "value exceeds 32-bit range")
    return value


def _derive_fahrenheit(row: SourceRow, celsius: float, record_id: str) -> int:
    """Convert temperature, keeping the Fahrenheit value within 32-bit range."""
    raw_value = row.fields[COLUMN_TEMPERATURE]
    fahrenheit = celsius_to_fahrenheit(celsius)
    if not INT32_MIN <= fahrenheit <= INT32_MAX:
        raise _field_error(
            row, "temperature_celsius", raw_value, record_id, "value exceeds 32-bit range"
        )
    return fahrenheit


def _require_layout(row: SourceRow) -> None:
    if len(row.fields) < MIN_COLUMN_COUNT:
        raise RecordLayoutError(
            f"Row at {row.location} has {len(row.fields)} columns, "
            f"expected at least {MIN_COLUMN_COUNT}. Check the file delimiter and layout.",
            field_name="id",
            raw_value="",
            location=row.location,
        )


def _field_error(
    row: SourceRow,
    field_name: str,
    raw_value: str,
    record_id: str,
    reason: str,
) -> FieldParseError:
    return FieldParseError(
        f"Failed to parse {field_name} at {row.location} (id={record_id}): "
        f"{reason}, got '{raw_value}'.",
        field_name=field_name,
        raw_value=raw_value,
        location=row.location,
        record_id=record_id,
    )
