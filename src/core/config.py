"""Runtime configuration model for the weather loader.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_BULK_BATCH_SIZE,
    DEFAULT_BULK_WORKERS,
    DEFAULT_INDEX_NAME,
    DEFAULT_MAPPING_PATH,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SOURCE_TIMEZONE,
    OFFSET_POLICY_CURRENT,
    SUPPORTED_OFFSET_POLICIES,
)
from core.errors import ConfigError


@dataclass(frozen=True)
class LoaderConfig:
    """Validated runtime configuration.

    Attributes:
        elastic_endpoint: Elasticsearch URL, required for index calls.
        elastic_username: Optional basic-auth user name.
        elastic_password: Optional basic-auth password.
        index_name: Target index for measurement documents.
        mapping_path: Index mapping document used on index creation.
        source_timezone: IANA zone the source timestamps are recorded in.
        offset_policy: ``current`` or ``record`` UTC offset resolution.
        bulk_workers: Number of concurrent bulk submission workers.
        bulk_batch_size: Create operations per bulk request.
        request_timeout: Per-request timeout in seconds.
    """

    elastic_endpoint: str | None
    elastic_username: str | None
    elastic_password: str | None
    index_name: str
    mapping_path: Path
    source_timezone: str
    offset_policy: str
    bulk_workers: int
    bulk_batch_size: int
    request_timeout: float

    @classmethod
    def from_env(cls) -> "LoaderConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ConfigError: If environment values are invalid.
        """
        offset_policy = os.getenv("WEATHER_OFFSET_POLICY", OFFSET_POLICY_CURRENT)
        return cls(
            elastic_endpoint=_optional_env("ELASTIC_ENDPOINT"),
            elastic_username=_optional_env("ELASTIC_USERNAME"),
            elastic_password=_optional_env("ELASTIC_PASSWORD"),
            index_name=os.getenv("WEATHER_INDEX_NAME", DEFAULT_INDEX_NAME),
            mapping_path=Path(
                os.getenv("WEATHER_MAPPING_PATH", str(DEFAULT_MAPPING_PATH))
            ).expanduser(),
            source_timezone=os.getenv("WEATHER_SOURCE_TIMEZONE", DEFAULT_SOURCE_TIMEZONE),
            offset_policy=validate_offset_policy(offset_policy),
            bulk_workers=_parse_positive_int(
                "WEATHER_BULK_WORKERS", os.getenv("WEATHER_BULK_WORKERS"), DEFAULT_BULK_WORKERS
            ),
            bulk_batch_size=_parse_positive_int(
                "WEATHER_BULK_BATCH_SIZE",
                os.getenv("WEATHER_BULK_BATCH_SIZE"),
                DEFAULT_BULK_BATCH_SIZE,
            ),
            request_timeout=_parse_timeout(os.getenv("WEATHER_REQUEST_TIMEOUT")),
        )

    def require_endpoint(self) -> str:
        """Return the Elasticsearch endpoint or fail with guidance.

        Raises:
            ConfigError: If ELASTIC_ENDPOINT is not set.
        """
        if not self.elastic_endpoint:
            raise ConfigError(
                "ELASTIC_ENDPOINT is not set. "
                "Export the Elasticsearch URL, e.g. ELASTIC_ENDPOINT=http://localhost:9200."
            )
        return self.elastic_endpoint


def validate_offset_policy(raw_value: str) -> str:
    """Validate a timestamp offset policy name.

    Args:
        raw_value: Policy name from environment or CLI.

    Returns:
        Normalized policy name.

    Raises:
        ConfigError: If the policy is not supported.
    """
    policy = raw_value.strip().lower()
    if policy not in SUPPORTED_OFFSET_POLICIES:
        raise ConfigError(
            f"Invalid WEATHER_OFFSET_POLICY value '{raw_value}'. "
            f"Supported values: {', '.join(SUPPORTED_OFFSET_POLICIES)}."
        )
    return policy


def _optional_env(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def _parse_positive_int(name: str, raw_value: str | None, default: int) -> int:
    """Parse a positive integer environment value.

    Raises:
        ConfigError: If value is not a positive integer.
    """
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = int(raw_value)
    except ValueError as error:
        raise ConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'. "
            f"Set {name} to a positive whole number."
        ) from error
    if value < 1:
        raise ConfigError(f"Invalid {name} value: expected value >= 1, got {value}.")
    return value


def _parse_timeout(raw_value: str | None) -> float:
    if raw_value is None or not raw_value.strip():
        return DEFAULT_REQUEST_TIMEOUT_SECONDS
    try:
        value = float(raw_value)
    except ValueError as error:
        raise ConfigError(
            f"Invalid WEATHER_REQUEST_TIMEOUT value: expected seconds, got '{raw_value}'."
        ) from error
    if value <= 0:
        raise ConfigError(
            f"Invalid WEATHER_REQUEST_TIMEOUT value: expected value > 0, got {value}."
        )
    return value
