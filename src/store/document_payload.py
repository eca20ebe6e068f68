"""Index document serialization for weather measurements.

This module centralizes the flat JSON document schema of the index.
It is used by the load pipeline and by tests that read documents back.
"""

from __future__ import annotations

from dataclasses import asdict, fields
import json
from typing import Any

from core.errors import SerializationError
from core.types import WeatherMeasurement

DOCUMENT_FIELDS = tuple(field.name for field in fields(WeatherMeasurement))


def measurement_to_document(measurement: WeatherMeasurement) -> dict[str, Any]:
    """Serialize a measurement into a JSON-safe index document.

    Args:
        measurement: Parsed measurement.

    Returns:
        Flat document keyed by measurement field name.

    Raises:
        SerializationError: If the document is not strict JSON.
    """
    document = asdict(measurement)
    try:
        json.dumps(document, allow_nan=False)
    except (TypeError, ValueError) as error:
        raise SerializationError(
            f"Failed to encode measurement {measurement.id} as JSON: {error}."
        ) from error
    return document


def measurement_from_document(document: dict[str, Any]) -> WeatherMeasurement:
    """Deserialize an index document into a measurement.

    Raises:
        SerializationError: If required fields are missing or mistyped.
    """
    missing = [name for name in DOCUMENT_FIELDS if name not in document]
    if missing:
        raise SerializationError(
            f"Invalid measurement document: missing fields {', '.join(missing)}."
        )
    try:
        return WeatherMeasurement(
            id=str(document["id"]),
            timestamp=str(document["timestamp"]),
            temperature_celsius=float(document["temperature_celsius"]),
            temperature_fahrenheit=int(document["temperature_fahrenheit"]),
            humidity_percentage=int(document["humidity_percentage"]),
            rain_intensity_mm_per_hour=float(document["rain_intensity_mm_per_hour"]),
            rain_intensity_inches_per_hour=float(document["rain_intensity_inches_per_hour"]),
            rain_since_last_hour_mm=float(document["rain_since_last_hour_mm"]),
            rain_since_last_hour_inches=float(document["rain_since_last_hour_inches"]),
            precipitation_type=int(document["precipitation_type"]),
        )
    except (TypeError, ValueError) as error:
        raise SerializationError(f"Invalid measurement document: {error}.") from error
