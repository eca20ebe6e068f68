"""Source timestamp normalization.

Sensor rows carry a local wall-clock date and time recorded in a fixed
named timezone. This module attaches a UTC offset to that wall-clock
value and renders an RFC 3339 instant.

Two offset policies exist. ``current`` applies the zone's offset at the
moment the loader runs to every record and ignores daylight-saving
changes between the record date and today; it is the default.
``record`` applies the offset in effect at the record's own time.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.constants import (
    OFFSET_POLICY_CURRENT,
    OFFSET_POLICY_RECORD,
    SOURCE_DATE_FORMAT,
    SOURCE_TIME_FORMAT,
)
from core.errors import TimestampFormatError, TimezoneResolutionError


class TimestampNormalizer:
    """Normalize source date/time pairs into ISO-8601 instants."""

    def __init__(
        self,
        timezone_name: str,
        offset_policy: str = OFFSET_POLICY_CURRENT,
        reference_time: datetime | None = None,
    ) -> None:
        self._zone = resolve_timezone(timezone_name)
        self._offset_policy = offset_policy
        self._fixed_offset = None
        if offset_policy == OFFSET_POLICY_CURRENT:
            self._fixed_offset = current_offset(self._zone, reference_time)
        elif offset_policy != OFFSET_POLICY_RECORD:
            raise ValueError(f"Unsupported offset policy: {offset_policy}")

    def normalize(self, date_text: str, time_text: str) -> str:
        """Return the RFC 3339 instant for one source date and time.

        Raises:
            TimestampFormatError: If the text does not match the source layout.
        """
        local_time = parse_local_time(date_text, time_text)
        if self._fixed_offset is not None:
            aware_time = local_time.replace(tzinfo=self._fixed_offset)
        else:
            aware_time = local_time.replace(tzinfo=self._zone)
        return format_rfc3339(aware_time)


def resolve_timezone(timezone_name: str) -> ZoneInfo:
    """Resolve an IANA timezone name.

    Raises:
        TimezoneResolutionError: If the zone is unknown to the system.
    """
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as error:
        raise TimezoneResolutionError(
            f"Failed to resolve timezone '{timezone_name}': {error}. "
            "Install tzdata or set WEATHER_SOURCE_TIMEZONE to a valid IANA name."
        ) from error


def current_offset(zone: ZoneInfo, reference_time: datetime | None = None) -> tzinfo:
    """Return the zone's UTC offset at ``reference_time`` (default: now)."""
    moment = reference_time or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local_moment = moment.astimezone(zone)
    return timezone(local_moment.utcoffset(), local_moment.tzname())


def parse_local_time(date_text: str, time_text: str) -> datetime:
    """Parse ``MM/DD/YYYY`` and ``HH:MM:SS AM|PM`` into a naive datetime.

    Raises:
        TimestampFormatError: If either part is malformed.
    """
    combined = f"{date_text} {time_text}"
    try:
        return datetime.strptime(combined, f"{SOURCE_DATE_FORMAT} {SOURCE_TIME_FORMAT}")
    except ValueError as error:
        raise TimestampFormatError(
            f"Failed to parse measurement timestamp '{combined}': {error}. "
            "Expected layout MM/DD/YYYY HH:MM:SS AM|PM."
        ) from error


def split_source_timestamp(raw_value: str) -> tuple[str, str]:
    """Split a ``MM/DD/YYYY HH:MM:SS PM`` column into date and time parts.

    Raises:
        TimestampFormatError: If the value has no time part.
    """
    date_text, separator, time_text = raw_value.strip().partition(" ")
    if not separator or not time_text.strip():
        raise TimestampFormatError(
            f"Failed to parse measurement timestamp '{raw_value}': missing time of day. "
            "Expected layout MM/DD/YYYY HH:MM:SS AM|PM."
        )
    return date_text, time_text.strip()


def format_rfc3339(value: datetime) -> str:
    """Render an aware datetime as RFC 3339, using ``Z`` for UTC."""
    rendered = value.isoformat(timespec="seconds")
    if rendered.endswith("+00:00"):
        return rendered[: -len("+00:00")] + "Z"
    return rendered
