# backend/app/domain/periods.py
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterator, Optional

log = logging.getLogger("revenue.periods")

MonthKey = str


# -------------------- Dates / month keys --------------------

def as_utc_date(value: Any) -> Optional[date]:
    """
    Reduce a date-ish value to a UTC calendar date.

    - date -> itself
    - aware datetime -> converted to UTC, then .date()
    - naive datetime -> assumed UTC
    - "YYYY-MM-DD" or ISO-8601 instant strings
    Anything else (or unparseable) -> None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            if len(s) == 10:
                return date.fromisoformat(s)
            return as_utc_date(datetime.fromisoformat(s.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def month_key(d: date) -> MonthKey:
    return f"{d.year:04d}-{d.month:02d}"


def parse_month_key(key: MonthKey) -> tuple[int, int]:
    y, m = [int(x) for x in key.split("-")]
    return y, m


def month_bounds(key: MonthKey) -> tuple[date, date]:
    y, m = parse_month_key(key)
    last_day = calendar.monthrange(y, m)[1]
    return date(y, m, 1), date(y, m, last_day)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def iter_month_keys(start: date, end: date) -> Iterator[MonthKey]:
    """Every month key from the month containing start through the month containing end."""
    y, m = start.year, start.month
    while (y, m) <= (end.year, end.month):
        yield f"{y:04d}-{m:02d}"
        y, m = shift_month(y, m, 1)


def trailing_month_keys(now: Any, count: int = 12) -> list[MonthKey]:
    """Oldest-first keys of the `count` months ending with the month containing `now`."""
    today = as_utc_date(now)
    if today is None:
        raise ValueError("now must be a date or datetime")
    out: list[MonthKey] = []
    for back in range(count - 1, -1, -1):
        y, m = shift_month(today.year, today.month, -back)
        out.append(f"{y:04d}-{m:02d}")
    return out


# -------------------- Period filter --------------------

class PeriodKind(str, Enum):
    ALL = "all"
    YEAR = "year"
    MONTH = "month"


def _as_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    try:
        return int(str(v).strip())
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class PeriodRequest:
    kind: PeriodKind = PeriodKind.ALL
    year: Optional[int] = None
    month: Optional[int] = None

    @classmethod
    def normalize(cls, period: Any = "all", year: Any = None, month: Any = None) -> "PeriodRequest":
        """
        Permissive: an unknown period, or a year/month period missing (or with
        an unparseable / out-of-range) year or month, becomes the all-time request.
        """
        raw = period.value if isinstance(period, PeriodKind) else str(period or "all").strip().lower()
        y = _as_int(year)
        m = _as_int(month)

        if y is not None and not (1 <= y <= 9999):
            y = None
        if m is not None and not (1 <= m <= 12):
            m = None

        if raw == PeriodKind.YEAR.value and y is not None:
            return cls(PeriodKind.YEAR, y, None)
        if raw == PeriodKind.MONTH.value and y is not None and m is not None:
            return cls(PeriodKind.MONTH, y, m)

        if raw != PeriodKind.ALL.value:
            log.debug("period request degraded to all: period=%r year=%r month=%r", period, year, month)
        return cls(PeriodKind.ALL, None, None)

    @property
    def month_key(self) -> Optional[MonthKey]:
        if self.kind is PeriodKind.MONTH:
            return f"{self.year:04d}-{self.month:02d}"
        return None

    @property
    def tag(self) -> str:
        """Short log/report label: "all", "2024" or "2024-02"."""
        if self.kind is PeriodKind.YEAR:
            return f"{self.year:04d}"
        return self.month_key or PeriodKind.ALL.value

    def matches(self, key: MonthKey) -> bool:
        if self.kind is PeriodKind.YEAR:
            return key.startswith(f"{self.year:04d}-")
        if self.kind is PeriodKind.MONTH:
            return key == self.month_key
        return True

    def fallback_months(self, observed_months: int) -> int:
        """Months-in-period when nothing in the timeline matched."""
        if self.kind is PeriodKind.MONTH:
            return 1
        if self.kind is PeriodKind.YEAR:
            return 12
        return observed_months or 1


def make_filter(period: Any = "all", year: Any = None, month: Any = None) -> Callable[[MonthKey], bool]:
    return PeriodRequest.normalize(period, year, month).matches
