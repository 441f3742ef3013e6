from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from errors import ValidationError

IST = timezone(timedelta(hours=5, minutes=30), "IST")
BUSINESS_DAY_OFFSET = timedelta(hours=5, minutes=30)
DAY_ROLLOVER = time(5, 30)
ONE_MS = timedelta(milliseconds=1)
# About five years; every report day becomes a row.
MAX_RANGE_DAYS = 5 * 366


class WindowPolicy(Enum):
    """How a caller's start/end dates become a createdAt range."""

    # [start 05:30 IST, end+1 05:30 IST)
    BUSINESS_DAY = "business_day"
    # [start 05:30 IST, end+1 05:29:59.999 IST)
    BUSINESS_DAY_TRIMMED = "business_day_trimmed"
    # [start 05:30 IST, end+1 05:30 IST]
    BUSINESS_DAY_CLOSED = "business_day_closed"
    # [start 00:00Z, end 23:59:59.999Z]
    CALENDAR_UTC = "calendar_utc"
    # [start, end) exactly as sent
    INSTANT = "instant"

    @property
    def uses_business_day(self) -> bool:
        return self in (
            WindowPolicy.BUSINESS_DAY,
            WindowPolicy.BUSINESS_DAY_TRIMMED,
            WindowPolicy.BUSINESS_DAY_CLOSED,
        )


@dataclass(frozen=True)
class DateWindow:
    # Bounds are naive UTC, matching what pymongo stores and returns.
    start: datetime
    end: datetime
    end_inclusive: bool
    policy: WindowPolicy
    first_day: date
    last_day: date

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def mongo_range(self) -> Dict[str, datetime]:
        upper = "$lte" if self.end_inclusive else "$lt"
        return {"$gte": self.start, upper: self.end}

    def contains(self, ts: datetime) -> bool:
        ts = to_naive_utc(ts)
        if ts < self.start:
            return False
        return ts <= self.end if self.end_inclusive else ts < self.end

    def day_key(self, ts: datetime) -> str:
        if self.policy.uses_business_day:
            return business_day_key(ts)
        return to_naive_utc(ts).date().isoformat()

    def days(self) -> List[str]:
        out = []
        current = self.first_day
        while current <= self.last_day:
            out.append(current.isoformat())
            current += timedelta(days=1)
        return out


def to_naive_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def business_day_key(ts: datetime) -> str:
    """
    Business day an instant belongs to. The café day rolls over at 05:30 IST,
    so 02:00 IST on the 2nd still counts as the 1st.
    Naive datetimes are taken as UTC (how Mongo hands them back).
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts.astimezone(IST) - BUSINESS_DAY_OFFSET).date().isoformat()


def _parse_value(value: Any) -> datetime | date:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return value
    raw = str(value or "").strip()
    if not raw:
        raise ValidationError("startDate and endDate are required")
    if len(raw) == 10:
        try:
            return datetime.strptime(raw, "%Y-%m-%d").date()
        except ValueError:
            raise ValidationError(f"Invalid date: {raw}")
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")


def civil_date(value: Any, tz: timezone) -> date:
    """Calendar date of a client-supplied value as seen in `tz`."""
    parsed = _parse_value(value)
    if isinstance(parsed, datetime):
        if parsed.tzinfo is None:
            return parsed.date()
        return parsed.astimezone(tz).date()
    return parsed


def parse_instant(value: Any) -> datetime:
    """Exact instant as naive UTC. Date-only and naive values are read as UTC."""
    parsed = _parse_value(value)
    if isinstance(parsed, datetime):
        return to_naive_utc(parsed)
    return datetime.combine(parsed, time.min)


def _build_day_window(first: date, last: date, policy: WindowPolicy) -> DateWindow:
    if policy.uses_business_day:
        start = datetime.combine(first, DAY_ROLLOVER, tzinfo=IST)
        end = datetime.combine(last + timedelta(days=1), DAY_ROLLOVER, tzinfo=IST)
        if policy is WindowPolicy.BUSINESS_DAY_TRIMMED:
            end -= ONE_MS
        inclusive = policy is WindowPolicy.BUSINESS_DAY_CLOSED
    else:
        start = datetime.combine(first, time.min, tzinfo=timezone.utc)
        end = datetime.combine(last, time(23, 59, 59, 999000), tzinfo=timezone.utc)
        inclusive = True
    return DateWindow(
        start=to_naive_utc(start),
        end=to_naive_utc(end),
        end_inclusive=inclusive,
        policy=policy,
        first_day=first,
        last_day=last,
    )


def _check_span(days: int) -> None:
    if days > MAX_RANGE_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")


def _normalize(start_value: Any, end_value: Any, policy: WindowPolicy) -> DateWindow:
    if policy is WindowPolicy.INSTANT:
        start = parse_instant(start_value)
        end = parse_instant(end_value)
        if end < start:
            raise ValidationError("startDate must be on or before endDate")
        _check_span((end - start).days)
        return DateWindow(
            start=start,
            end=end,
            end_inclusive=False,
            policy=policy,
            first_day=start.date(),
            last_day=end.date(),
        )

    # The dashboard is used from India: a browser's local midnight arrives as
    # 18:30Z the evening before, so the day is always read in IST.
    first = civil_date(start_value, IST)
    last = civil_date(end_value, IST)
    if last < first:
        raise ValidationError("startDate must be on or before endDate")
    _check_span((last - first).days + 1)
    return _build_day_window(first, last, policy)


def normalize_window(start_value: Any, end_value: Any, policy: WindowPolicy) -> DateWindow:
    if start_value in (None, "") or end_value in (None, ""):
        raise ValidationError("startDate and endDate are required")
    try:
        return _normalize(start_value, end_value, policy)
    except OverflowError:
        raise ValidationError("Date out of range")


def _previous(window: DateWindow) -> DateWindow:
    if window.policy is not WindowPolicy.INSTANT:
        span = (window.last_day - window.first_day).days + 1
        return _build_day_window(
            window.first_day - timedelta(days=span),
            window.first_day - timedelta(days=1),
            window.policy,
        )

    if window.start == window.end:
        day = window.start.date() - timedelta(days=1)
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
    else:
        start = window.start - window.duration
        end = window.start
    return DateWindow(
        start=start,
        end=end,
        end_inclusive=False,
        policy=window.policy,
        first_day=start.date(),
        last_day=end.date(),
    )


def previous_window(window: DateWindow) -> DateWindow:
    """
    Same-length period immediately before `window`, with no gap.
    A zero-width instant window compares against the whole UTC day before it.
    """
    try:
        return _previous(window)
    except OverflowError:
        raise ValidationError("No previous period before this date range")


def optional_window(
    start_value: Any, end_value: Any, policy: WindowPolicy
) -> Optional[DateWindow]:
    if start_value in (None, "") and end_value in (None, ""):
        return None
    return normalize_window(start_value, end_value, policy)
