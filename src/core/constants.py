"""Core constants used across weather loader modules.

This module centralizes the source layout and loader defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_INDEX_NAME = "chicago-weather"
DEFAULT_MAPPING_PATH = Path("mapping.json")
DEFAULT_SOURCE_FILES = ("oak2017.csv",)
DEFAULT_SOURCE_TIMEZONE = "America/Chicago"
DEFAULT_BULK_WORKERS = 4
DEFAULT_BULK_BATCH_SIZE = 500
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
BULK_OPERATION_TYPE = "create"

OFFSET_POLICY_CURRENT = "current"
OFFSET_POLICY_RECORD = "record"
SUPPORTED_OFFSET_POLICIES = (OFFSET_POLICY_CURRENT, OFFSET_POLICY_RECORD)

HEADER_MARKER = "Station Name"
SOURCE_DATE_FORMAT = "%m/%d/%Y"
SOURCE_TIME_FORMAT = "%I:%M:%S %p"

COLUMN_TIMESTAMP = 1
COLUMN_TEMPERATURE = 2
COLUMN_HUMIDITY = 4
COLUMN_RAIN_INTENSITY = 5
COLUMN_INTERVAL_RAIN = 6
COLUMN_PRECIPITATION_TYPE = 8
COLUMN_RECORD_ID = 17
MIN_COLUMN_COUNT = COLUMN_RECORD_ID + 1

FAHRENHEIT_SCALE = 1.8
FAHRENHEIT_OFFSET = 32.0
INCHES_PER_MILLIMETER = 0.0393701
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
FLOAT32_MAX = 3.4028234663852886e38

CONFLICT_STATUS_CODE = 409
