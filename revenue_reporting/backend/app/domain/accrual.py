# backend/app/domain/accrual.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .money import Money, money_sum
from .periods import MonthKey, iter_month_keys, month_bounds
from .records import Lease

log = logging.getLogger("revenue.accrual")


def _empty() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class Allocation:
    """
    One lease's earned rent and occupied nights, bucketed by month key.

    Each month is rounded on its own, so the total may drift from the
    nominal rent by up to one cent per month touched. That drift is kept.
    """

    earned: Mapping[MonthKey, Money] = field(default_factory=_empty)
    nights: Mapping[MonthKey, int] = field(default_factory=_empty)

    @property
    def months(self) -> list[MonthKey]:
        return sorted(set(self.earned) | set(self.nights))

    @property
    def total_earned(self) -> Money:
        return money_sum(self.earned.values())

    @property
    def total_nights(self) -> int:
        return sum(self.nights.values())

    def __bool__(self) -> bool:
        return bool(self.earned or self.nights)


def allocate(lease: Any) -> Allocation:
    """
    Prorate a lease's monthly rent across the calendar months it spans.

    For every month touched, the active span is clamped to the month and
    the month's share is rent * active_days / days_in_month (that month's own
    day count), rounded half-up to the cent. Night counts are inclusive
    day spans: a Jan 15 - Jan 31 stay is 17 nights.

    Leases with missing or inverted dates, or no rent, allocate nothing.
    """
    lease = Lease.from_row(lease)

    start = lease.effective_start
    end = lease.effective_end
    if start is None or end is None or end < start:
        log.debug("lease skipped for accrual: bad date range", extra={"lease_id": lease.id})
        return Allocation()

    rent = lease.monthly_rent_cents
    if not rent:
        log.debug("lease skipped for accrual: no rent", extra={"lease_id": lease.id})
        return Allocation()

    earned: dict[MonthKey, Money] = {}
    nights: dict[MonthKey, int] = {}

    for key in iter_month_keys(start, end):
        month_start, month_end = month_bounds(key)
        active_start = max(month_start, start)
        active_end = min(month_end, end)
        if active_end < active_start:
            continue

        active_days = (active_end - active_start).days + 1
        days_in_month = (month_end - month_start).days + 1

        earned[key] = earned.get(key, Money.zero()) + rent.prorate(active_days, days_in_month)
        nights[key] = nights.get(key, 0) + active_days

    return Allocation(earned=MappingProxyType(earned), nights=MappingProxyType(nights))
