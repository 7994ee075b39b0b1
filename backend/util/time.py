from __future__ import annotations

from datetime import date, datetime, timezone


class TimePolicyError(ValueError):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def require_utc_aware(dt: datetime, field_name: str) -> datetime:
    """
    Strict policy:
    - dt MUST be timezone-aware
    - converted to UTC
    """
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise TimePolicyError(
            f"{field_name} must be timezone-aware UTC (ISO 8601, e.g. 2025-01-01T00:00:00Z)"
        )
    return dt.astimezone(timezone.utc)


def from_db_utc(dt: datetime | None) -> datetime | None:
    """
    Interprets naive DB timestamps as UTC and returns timezone-aware UTC.
    Some drivers (SQLite) drop tzinfo even on DateTime(timezone=True) columns.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_instant(value: datetime | date | str, field_name: str) -> datetime:
    """
    Accepts aware datetimes, plain dates (midnight UTC) and ISO 8601 strings
    ("Z" or explicit offset). Anything else raises TimePolicyError.
    """
    if isinstance(value, datetime):
        return require_utc_aware(value, field_name)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise TimePolicyError(f"{field_name} is empty")
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError as e:
            raise TimePolicyError(f"{field_name} is not a valid ISO 8601 instant: {value!r}") from e
        if len(s) == 10:
            # bare date
            return dt.replace(tzinfo=timezone.utc)
        return require_utc_aware(dt, field_name)
    raise TimePolicyError(f"{field_name} must be a datetime or ISO 8601 string")


def to_iso_z(dt: datetime) -> str:
    """Canonical UTC representation with millisecond precision, e.g. 2024-01-03T00:00:00.000Z."""
    dt_utc = require_utc_aware(dt, "dt")
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt_utc.microsecond // 1000:03d}Z"
