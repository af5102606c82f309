"""Utilities for working with RFC3339 timestamps and UTC datetimes."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


UTC = timezone.utc
# Last second of a day; the day window is inclusive at both ends.
END_OF_DAY = time(23, 59, 59)


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def day_bounds_utc(day: date) -> Tuple[datetime, datetime]:
    """``day 00:00:00`` and ``day 23:59:59`` in UTC."""
    return midnight_utc(day), datetime.combine(day, END_OF_DAY, tzinfo=UTC)


def _normalize_fraction(s: str) -> str:
    """Pad or trim fractional seconds to 6 digits."""

    digits = s[:6]
    if len(digits) < 6:
        digits = digits + "0" * (6 - len(digits))
    return digits


def parse_rfc3339(s: Optional[str]) -> Optional[datetime]:
    """Parse a RFC3339 string and return a timezone-aware UTC datetime."""

    if not s:
        return None

    value = s.strip()
    if not value:
        return None

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    if "." in value:
        head, tail = value.split(".", 1)
        tz_sign = "+"
        tz_suffix = "00:00"
        if "+" in tail:
            frac, tz_suffix = tail.split("+", 1)
            tz_sign = "+"
        elif "-" in tail:
            frac, tz_suffix = tail.split("-", 1)
            tz_sign = "-"
        else:
            frac = tail
        frac = _normalize_fraction(frac)
        value = f"{head}.{frac}{tz_sign}{tz_suffix}"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_rfc3339_utc(dt: Optional[Union[datetime, str]]) -> Optional[str]:
    """Serialize a datetime (or string) to RFC3339 in UTC with second precision."""

    if dt is None:
        return None
    if isinstance(dt, str):
        dt = parse_rfc3339(dt)
    value = ensure_utc(dt)
    if value is None:
        return None
    return value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def local_time_zone_name(default: Optional[str] = None) -> str:
    """IANA name of the machine's time zone, ``default`` or ``"UTC"`` otherwise."""
    if default:
        try:
            return ZoneInfo(default).key
        except (ZoneInfoNotFoundError, ValueError):
            pass
    now = datetime.now().astimezone()
    tz = now.tzinfo or ZoneInfo("UTC")
    # Fixed-offset zones carry abbreviations ("CET") the calendar API rejects.
    return getattr(tz, "key", None) or "UTC"


def localize(dt: datetime, tz_name: Optional[str]) -> datetime:
    """Attach ``tz_name`` to a naive datetime; aware values pass through."""
    if dt.tzinfo is not None:
        return dt
    try:
        tz = ZoneInfo(tz_name) if tz_name else UTC
    except (ZoneInfoNotFoundError, ValueError):
        tz = UTC
    return dt.replace(tzinfo=tz)


__all__ = [
    "END_OF_DAY",
    "UTC",
    "day_bounds_utc",
    "ensure_utc",
    "local_time_zone_name",
    "localize",
    "midnight_utc",
    "parse_rfc3339",
    "to_rfc3339_utc",
    "utc_now",
]
