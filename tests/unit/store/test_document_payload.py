"""Unit tests for measurement document serialization."""

from __future__ import annotations

from dataclasses import replace
import json

import pytest

from core.errors import SerializationError
from core.types import WeatherMeasurement
from store.document_payload import (
    DOCUMENT_FIELDS,
    measurement_from_document,
    measurement_to_document,
)


def _measurement() -> WeatherMeasurement:
    return WeatherMeasurement(
        id="OakStreetWeatherStation202007040900",
        timestamp="2020-07-04T09:00:00-05:00",
        temperature_celsius=26.7,
        temperature_fahrenheit=80,
        humidity_percentage=64,
        rain_intensity_mm_per_hour=2.5,
        rain_intensity_inches_per_hour=0.09842525,
        rain_since_last_hour_mm=1.2,
        rain_since_last_hour_inches=0.04724412,
        precipitation_type=60,
    )


def test_document_roundtrip_preserves_every_field() -> None:
    """Serializing and deserializing yields an equal measurement."""
    measurement = _measurement()

    document = json.loads(json.dumps(measurement_to_document(measurement)))

    assert measurement_from_document(document) == measurement


def test_document_uses_flat_schema_field_names() -> None:
    """Documents are flat objects keyed by the index field names."""
    document = measurement_to_document(_measurement())

    assert tuple(document) == DOCUMENT_FIELDS
    assert "timestamp" in document and "precipitation_type" in document


def test_document_rejects_non_finite_values() -> None:
    """NaN is not valid JSON and cannot be indexed."""
    measurement = replace(_measurement(), rain_since_last_hour_mm=float("nan"))

    with pytest.raises(SerializationError):
        measurement_to_document(measurement)


def test_from_document_requires_every_field() -> None:
    """Partial documents are rejected."""
    document = measurement_to_document(_measurement())
    del document["humidity_percentage"]

    with pytest.raises(SerializationError):
        measurement_from_document(document)
