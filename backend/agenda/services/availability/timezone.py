# backend/agenda/services/availability/timezone.py
"""
Calendar-day and UTC offset helpers.

Every function here is a pure function of its arguments; nothing depends on
the host timezone or locale.

Known approximation: one offset is resolved per calendar day (sampled at
local noon) and applied to every slot of that day. A DST transition that
happens inside the day is not modelled; slots on such a day are shifted by
the transition delta on one side of it. NoonOffsetResolver can be swapped
for an exact implementation through the TimezoneOffsetResolver protocol.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import get_engine_config
from .errors import ValidationError
from .types import DayRange

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TimezoneOffsetResolver(Protocol):
    def offset_minutes(self, tz_name: str, target_date: date) -> int:
        """Minutes to add to a local wall-clock time to obtain UTC."""
        ...


class NoonOffsetResolver:
    """Resolves the offset in effect at local noon of the target date."""

    def __init__(self, fallback_timezone: str | None = None):
        self.fallback_timezone = fallback_timezone or get_engine_config().default_timezone

    def offset_minutes(self, tz_name: str, target_date: date) -> int:
        tz = load_zone(tz_name, self.fallback_timezone)
        local_noon = datetime.combine(target_date, time(12, 0), tzinfo=tz)
        utc_offset = local_noon.utcoffset() or timedelta(0)
        # Sao Paulo: UTC-03:00 -> +180 (local 09:00 is 12:00 UTC)
        return -int(utc_offset.total_seconds() // 60)


def load_zone(tz_name: str | None, fallback: str) -> ZoneInfo:
    """Load an IANA zone, falling back to the default zone for unknown names."""
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.warning(f"Unknown timezone '{tz_name}', using {fallback}")
    return ZoneInfo(fallback)


def parse_date(value: str | date) -> date:
    """Parse a strict "YYYY-MM-DD" calendar date."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from None


def day_of_week(target_date: date) -> int:
    """Day of week of a calendar date, 0 = Sunday .. 6 = Saturday."""
    return (target_date.weekday() + 1) % 7


def local_midnight_utc(target_date: date) -> datetime:
    """UTC midnight carrying the target date; slot starts are offsets from it."""
    return datetime.combine(target_date, time(0, 0), tzinfo=timezone.utc)


def local_day_bounds(target_date: date, offset_minutes: int) -> DayRange:
    """Half-open UTC range [start, end) covering the local calendar day."""
    start = local_midnight_utc(target_date) + timedelta(minutes=offset_minutes)
    return DayRange(start=start, end=start + timedelta(days=1))


def format_instant(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
