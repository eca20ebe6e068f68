"""Unit tests for weather record parsing."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.errors import FieldParseError, RecordLayoutError, TimestampFormatError
from core.types import SourceRow
from ingest.record_parser import RecordParser
from ingest.timestamp import TimestampNormalizer

_HEADER = (
    "Station Name,Measurement Timestamp,Air Temperature,Wet Bulb Temperature,Humidity,"
    "Rain Intensity,Interval Rain,Total Rain,Precipitation Type,Wind Direction,Wind Speed,"
    "Maximum Wind Speed,Barometric Pressure,Solar Radiation,Heading,Battery Life,"
    "Measurement Timestamp Label,Measurement ID"
).split(",")


def _parser() -> RecordParser:
    normalizer = TimestampNormalizer(
        "America/Chicago",
        "current",
        reference_time=datetime(2024, 1, 10, 18, 0, tzinfo=timezone.utc),
    )
    return RecordParser(normalizer)


def _row(**overrides: str) -> SourceRow:
    fields = [
        "Oak Street Weather Station",
        "07/04/2020 09:00:00 AM",
        "26.7",
        "21.3",
        "64",
        "2.5",
        "1.2",
        "14.6",
        "60",
        "180",
        "5.4",
        "7.9",
        "1011.2",
        "620",
        "1",
        "12",
        "07/04/2020 9:00 AM",
        "OakStreetWeatherStation202007040900",
    ]
    columns = {"timestamp": 1, "temperature": 2, "humidity": 4, "rain": 5,
               "interval": 6, "precipitation": 8, "id": 17}
    for name, value in overrides.items():
        fields[columns[name]] = value
    return SourceRow(source_path="oak.csv", line_number=2, fields=tuple(fields))


def test_parse_builds_measurement_with_derived_fields() -> None:
    """Parser should convert every column and derive imperial units."""
    measurement = _parser().parse(_row())

    assert measurement is not None
    assert measurement.id == "OakStreetWeatherStation202007040900"
    assert measurement.timestamp == "2020-07-04T09:00:00-06:00"
    assert measurement.temperature_celsius == 26.7
    assert measurement.temperature_fahrenheit == 80
    assert measurement.humidity_percentage == 64
    assert measurement.rain_intensity_mm_per_hour == 2.5
    assert measurement.rain_intensity_inches_per_hour == pytest.approx(2.5 * 0.0393701, rel=1e-6)
    assert measurement.rain_since_last_hour_mm == 1.2
    assert measurement.rain_since_last_hour_inches == pytest.approx(1.2 * 0.0393701, rel=1e-6)
    assert measurement.precipitation_type == 60


def test_parse_skips_header_row() -> None:
    """The header row yields no measurement and no error."""
    row = SourceRow(source_path="oak.csv", line_number=1, fields=tuple(_HEADER))

    assert _parser().parse(row) is None


def test_parse_skips_short_header_row() -> None:
    """Header detection only looks at the first column."""
    row = SourceRow(source_path="oak.csv", line_number=1, fields=("Station Name",))

    assert _parser().parse(row) is None


@pytest.mark.parametrize(
    ("column", "raw_value", "field_name"),
    [
        ("temperature", "warm", "temperature_celsius"),
        ("humidity", "64.5", "humidity_percentage"),
        ("humidity", " 64", "humidity_percentage"),
        ("rain", "", "rain_intensity_mm_per_hour"),
        ("interval", "1_0", "rain_since_last_hour_mm"),
        ("precipitation", "rain", "precipitation_type"),
        ("temperature", "NaN", "temperature_celsius"),
    ],
)
def test_parse_raises_field_error_for_malformed_numbers(
    column: str, raw_value: str, field_name: str
) -> None:
    """Malformed numeric columns fail with the field name and raw value."""
    with pytest.raises(FieldParseError) as error_info:
        _parser().parse(_row(**{column: raw_value}))

    assert error_info.value.field_name == field_name
    assert error_info.value.raw_value == raw_value
    assert error_info.value.location == "oak.csv:2"


def test_parse_error_keeps_accepted_record_id() -> None:
    """A later field failure still reports the id accepted before it."""
    with pytest.raises(FieldParseError) as error_info:
        _parser().parse(_row(precipitation="x"))

    assert error_info.value.record_id == "OakStreetWeatherStation202007040900"


def test_parse_reports_first_failing_field_in_order() -> None:
    """Temperature is checked before humidity."""
    with pytest.raises(FieldParseError) as error_info:
        _parser().parse(_row(temperature="?", humidity="?"))

    assert error_info.value.field_name == "temperature_celsius"


def test_parse_rejects_int32_overflow() -> None:
    """Whole-number fields must fit a signed 32-bit integer."""
    with pytest.raises(FieldParseError):
        _parser().parse(_row(precipitation="2147483648"))


def test_parse_accepts_signed_integers() -> None:
    """Base-10 integers may carry an explicit sign."""
    measurement = _parser().parse(_row(precipitation="-1"))

    assert measurement is not None and measurement.precipitation_type == -1


def test_parse_rejects_empty_id() -> None:
    """Documents are keyed by id, so it must be present."""
    with pytest.raises(FieldParseError) as error_info:
        _parser().parse(_row(id=""))

    assert error_info.value.field_name == "id"


def test_parse_raises_layout_error_for_short_row() -> None:
    """Rows missing the id column fail before any field is read."""
    row = SourceRow(source_path="oak.csv", line_number=3, fields=("Oak", "01/15/2020"))

    with pytest.raises(RecordLayoutError):
        _parser().parse(row)


def test_parse_raises_for_malformed_timestamp() -> None:
    """Timestamp is validated before the numeric columns."""
    with pytest.raises(TimestampFormatError):
        _parser().parse(_row(timestamp="2020-07-04T09:00:00", temperature="?"))


def test_parse_rejects_temperature_overflowing_fahrenheit() -> None:
    """1.5e9C converts to more Fahrenheit degrees than an int32 holds."""
    with pytest.raises(FieldParseError) as error_info:
        _parser().parse(_row(temperature="1.5e9"))

    assert error_info.value.field_name == "temperature_celsius"
    assert error_info.value.raw_value == "1.5e9"


def test_parse_rejects_float_values_beyond_float32() -> None:
    """Decimal fields must fit a 32-bit float."""
    with pytest.raises(FieldParseError) as error_info:
        _parser().parse(_row(rain="1e39"))

    assert error_info.value.field_name == "rain_intensity_mm_per_hour"


def test_parse_accepts_fahrenheit_at_int32_bound() -> None:
    """Large temperatures inside both ranges still parse."""
    measurement = _parser().parse(_row(temperature="1e9"))

    assert measurement is not None
    assert measurement.temperature_fahrenheit == 1800000032
