from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DD" is midnight UTC of that day
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    # Normalize to UTC-naive
    if dt.tzinfo is None:
        # interpret naive as UTC
        return dt.replace(tzinfo=None)

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    return date.fromisoformat(s[:10])


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[midnight, next midnight) for a calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def _is_date_only(value: str) -> bool:
    return len(value.strip()) == 10


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive start, end bound whose inclusivity depends on how it was given.

    A date-only end ("2026-03-01") covers that whole day, so it is stored as the
    next midnight and compared with "<". A full timestamp end is compared with "<=".
    """
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    end_exclusive: bool = False

    def apply(self, query, column):
        if self.start is not None:
            query = query.filter(column >= self.start)
        if self.end is not None:
            query = query.filter(column < self.end if self.end_exclusive else column <= self.end)
        return query

    @classmethod
    def for_day(cls, day: date) -> "DateRange":
        start, end = day_bounds(day)
        return cls(start=start, end=end, end_exclusive=True)


def parse_date_range(start: Optional[str], end: Optional[str]) -> DateRange:
    """Raises ValueError on malformed input."""
    start_dt = parse_iso_datetime(start) if start else None
    end_dt = None
    end_exclusive = False
    if end and end.strip():
        if _is_date_only(end):
            end_dt = day_bounds(parse_iso_date(end))[1]
            end_exclusive = True
        else:
            end_dt = parse_iso_datetime(end)
    return DateRange(start=start_dt, end=end_dt, end_exclusive=end_exclusive)


def months_ago(day: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the end of shorter months."""
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))
