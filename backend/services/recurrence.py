"""
Recurrence expansion for events.

Rules are the RRULE subset the admin editor produces:

  FREQ=DAILY|WEEKLY|MONTHLY [;INTERVAL=n] [;BYDAY=MO,WE (weekly only)]
  [;BYMONTHDAY=1..31 (monthly only)] [;UNTIL=...] [;COUNT=n]

Expansion works at date granularity: every occurrence keeps the anchor's
time-of-day and duration, only the calendar date moves.

Month-end policy: a MONTHLY rule pinned to a day the month does not have
(BYMONTHDAY=31 in April, or an anchor on the 30th in February) skips that
month. It is never clamped to the last day of the month.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterator, Mapping, Optional, Sequence

from dateutil.relativedelta import relativedelta
from dateutil.rrule import rrule, rruleset, rrulestr

from services.errors import RecurrenceConfigError
from util.time import TimePolicyError, from_db_utc, parse_instant, require_utc_aware, to_iso_z


SUPPORTED_FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY")
WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
ALLOWED_KEYS = {"FREQ", "INTERVAL", "BYDAY", "BYMONTHDAY", "UNTIL", "COUNT", "WKST"}

DEFAULT_MAX_OCCURRENCES = 500

_ICS_UTC_RE = re.compile(r"^\d{8}T\d{6}Z$")
_ICS_DATE_RE = re.compile(r"^\d{8}$")


def _extract_rule_part(raw: str) -> str:
    """Drops DTSTART lines and an optional 'RRULE:' prefix."""
    lines = [ln.strip() for ln in re.split(r"\r?\n", raw)]
    lines = [ln for ln in lines if ln and not re.match(r"^DTSTART\b", ln, re.IGNORECASE)]
    joined = "\n".join(lines)
    m = re.search(r"RRULE\s*:\s*(.*)$", joined, re.IGNORECASE | re.DOTALL)
    if m:
        joined = m.group(1)
    return re.sub(r"\s*\n\s*", "", joined).strip()


def _normalize_until(value: str) -> str:
    if _ICS_UTC_RE.match(value):
        return value
    if _ICS_DATE_RE.match(value):
        # inclusive whole day
        return f"{value}T235959Z"
    try:
        dt = parse_instant(value, "UNTIL")
    except TimePolicyError as e:
        raise RecurrenceConfigError(f"Invalid UNTIL value in rrule: {value}") from e
    return dt.strftime("%Y%m%dT%H%M%SZ")


def _positive_int(key: str, value: str) -> int:
    try:
        n = int(value)
    except ValueError as e:
        raise RecurrenceConfigError(f"{key} must be a positive integer") from e
    if n <= 0:
        raise RecurrenceConfigError(f"{key} must be a positive integer")
    return n


def normalize_rrule(raw: Any) -> str:
    """
    Returns the canonical rule text (uppercase keys, UTC ICS UNTIL, no DTSTART).
    Raises RecurrenceConfigError for anything outside the supported subset.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise RecurrenceConfigError("recurrence.rrule is required and must be a string")

    pure = _extract_rule_part(raw)
    parts: dict[str, str] = {}
    for part in (p.strip() for p in pure.split(";")):
        if not part:
            continue
        key, sep, value = part.partition("=")
        key = key.strip().upper()
        value = value.strip()
        if not sep or not key or not value:
            raise RecurrenceConfigError(f"Malformed rrule part: {part!r}")
        if key not in ALLOWED_KEYS:
            raise RecurrenceConfigError(f"Unsupported rrule key: {key}")
        parts[key] = value

    freq = parts.get("FREQ", "").upper()
    if freq not in SUPPORTED_FREQUENCIES:
        raise RecurrenceConfigError(f"FREQ must be one of {', '.join(SUPPORTED_FREQUENCIES)}")
    parts["FREQ"] = freq

    if "INTERVAL" in parts:
        parts["INTERVAL"] = str(_positive_int("INTERVAL", parts["INTERVAL"]))
    if "COUNT" in parts:
        parts["COUNT"] = str(_positive_int("COUNT", parts["COUNT"]))

    if "BYDAY" in parts:
        if freq != "WEEKLY":
            raise RecurrenceConfigError("BYDAY is only supported with FREQ=WEEKLY")
        days = [d.strip().upper() for d in parts["BYDAY"].split(",") if d.strip()]
        if not days or any(d not in WEEKDAY_CODES for d in days):
            raise RecurrenceConfigError(f"Invalid BYDAY value: {parts['BYDAY']}")
        parts["BYDAY"] = ",".join(days)

    if "BYMONTHDAY" in parts:
        if freq != "MONTHLY":
            raise RecurrenceConfigError("BYMONTHDAY is only supported with FREQ=MONTHLY")
        day = _positive_int("BYMONTHDAY", parts["BYMONTHDAY"])
        if day > 31:
            raise RecurrenceConfigError("BYMONTHDAY must be between 1 and 31")
        parts["BYMONTHDAY"] = str(day)

    if "UNTIL" in parts:
        parts["UNTIL"] = _normalize_until(parts["UNTIL"])

    if "UNTIL" in parts and "COUNT" in parts:
        raise RecurrenceConfigError("UNTIL and COUNT cannot be combined")

    return ";".join(f"{k}={v}" for k, v in parts.items())


def _parse_date_list(name: str, value: Any) -> tuple[datetime, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise RecurrenceConfigError(f"recurrence.{name} must be an array of dates")
    out: list[datetime] = []
    for item in value:
        try:
            out.append(parse_instant(item, f"recurrence.{name}"))
        except TimePolicyError as e:
            raise RecurrenceConfigError(str(e)) from e
    return tuple(out)


def _parse_until(value: Any) -> datetime:
    """A bare date bounds the whole day (inclusive)."""
    is_bare_date = (isinstance(value, date) and not isinstance(value, datetime)) or (
        isinstance(value, str) and len(value.strip()) == 10
    )
    dt = parse_instant(value, "recurrence.until")
    if is_bare_date:
        return dt + timedelta(days=1) - timedelta(microseconds=1)
    return dt


@dataclass(frozen=True)
class Recurrence:
    rrule: str
    until: Optional[datetime] = None
    exdates: tuple[datetime, ...] = ()
    rdates: tuple[datetime, ...] = ()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Recurrence":
        """Validates a raw recurrence object (request body or stored row)."""
        if not isinstance(raw, Mapping):
            raise RecurrenceConfigError("recurrence must be an object")

        until_raw = raw.get("until")
        until = None
        if until_raw not in (None, ""):
            try:
                until = _parse_until(until_raw)
            except TimePolicyError as e:
                raise RecurrenceConfigError(str(e)) from e

        return cls(
            rrule=normalize_rrule(raw.get("rrule")),
            until=until,
            exdates=_parse_date_list("exdates", raw.get("exdates")),
            rdates=_parse_date_list("rdates", raw.get("rdates")),
        )

    @classmethod
    def from_row(cls, row: Any) -> "Recurrence":
        """From an EventRecurrence row. Stored values are re-validated."""
        return cls.from_mapping(
            {
                "rrule": row.rrule,
                "until": from_db_utc(row.until),
                "exdates": row.exdates,
                "rdates": row.rdates,
            }
        )


@dataclass(frozen=True)
class OccurrenceWindow:
    start: datetime
    end: datetime


def _at_anchor_time(d: datetime, anchor: datetime) -> datetime:
    """Keeps the calendar date of d (UTC), takes the time-of-day of the anchor."""
    return datetime.combine(
        d.astimezone(timezone.utc).date(), anchor.timetz()
    ).astimezone(timezone.utc)


class OccurrenceExpansion:
    """
    Finite, restartable sequence of occurrence start instants. Iterating again
    recomputes from scratch; nothing is cached between iterations.
    """

    def __init__(
        self,
        anchor_start: datetime,
        anchor_end: datetime,
        rule: Recurrence | None,
        horizon: datetime,
        *,
        not_before: datetime | None = None,
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
    ) -> None:
        self.anchor_start = require_utc_aware(anchor_start, "anchorStart")
        self.anchor_end = require_utc_aware(anchor_end, "anchorEnd")
        self.horizon = require_utc_aware(horizon, "horizon")
        self.rule = rule
        self.not_before = require_utc_aware(not_before, "notBefore") if not_before else None
        if max_occurrences <= 0:
            raise RecurrenceConfigError("max_occurrences must be > 0")
        self.max_occurrences = max_occurrences
        self.duration = max(timedelta(0), self.anchor_end - self.anchor_start)

    @property
    def bound(self) -> datetime:
        if self.rule is not None and self.rule.until is not None:
            return min(self.rule.until, self.horizon)
        return self.horizon

    def _ruleset(self, rule: Recurrence) -> rruleset:
        rs = rruleset()
        base = rrulestr(rule.rrule, dtstart=self.anchor_start)
        if not isinstance(base, rrule):
            raise RecurrenceConfigError("rrule must describe a single rule")
        rs.rrule(base)
        for r in rule.rdates:
            rs.rdate(_at_anchor_time(r, self.anchor_start))
        for x in rule.exdates:
            rs.exdate(_at_anchor_time(x, self.anchor_start))
        return rs

    def __iter__(self) -> Iterator[datetime]:
        if self.rule is None:
            yield self.anchor_start
            return

        bound = self.bound
        produced = 0
        # rruleset yields in ascending order and drops duplicates/exdates.
        for occ in self._ruleset(self.rule):
            if occ > bound:
                break
            if self.not_before is not None and occ + self.duration < self.not_before:
                continue
            yield occ
            produced += 1
            if produced >= self.max_occurrences:
                break

    def windows(self) -> Iterator[OccurrenceWindow]:
        for start in self:
            yield OccurrenceWindow(start=start, end=start + self.duration)


def expand_occurrences(
    anchor_start: datetime,
    anchor_end: datetime,
    rule: Recurrence | None,
    horizon: datetime,
    *,
    not_before: datetime | None = None,
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> OccurrenceExpansion:
    return OccurrenceExpansion(
        anchor_start,
        anchor_end,
        rule,
        horizon,
        not_before=not_before,
        max_occurrences=max_occurrences,
    )


def horizon_from(now: datetime, months: int) -> datetime:
    """now + N calendar months."""
    return require_utc_aware(now, "now") + relativedelta(months=months)


def dates_to_iso(values: Sequence[datetime | date]) -> list[str]:
    return [to_iso_z(parse_instant(v, "date")) for v in values]
