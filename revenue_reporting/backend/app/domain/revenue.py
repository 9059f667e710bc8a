# backend/app/domain/revenue.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from .accrual import allocate
from .deposits import deposit_refunds_by_lease, sum_deposits
from .money import Money, div_round_half_up, money_sum
from .periods import MonthKey, PeriodRequest, as_utc_date, month_key, trailing_month_keys
from .records import Lease, Payment

log = logging.getLogger("revenue.engine")

CASH_WINDOW_MONTHS = 12
RECENT_PAYMENTS_LIMIT = 50


@dataclass(frozen=True)
class CashSummary:
    total_revenue: Money
    net_revenue: Money
    total_fees: Money
    refunds_total: Money
    payment_count: int
    average_payment: float  # cents, unrounded


@dataclass(frozen=True)
class TypeBucket:
    count: int = 0
    amount: Money = Money(0)


@dataclass(frozen=True)
class AccrualSummary:
    total_earned: Money
    occupied_nights: int
    average_monthly_earned: Money
    average_nightly_rate: Money
    months_in_period: int
    outstanding_deposits: Money
    released_deposits: Money
    upcoming_revenue: Money


@dataclass(frozen=True)
class RevenueSummary:
    """
    Cash + accrual view of revenue for one request.

    Cash quantities cover every succeeded payment given (the monthly cash
    series is always the trailing window ending at `now`). The period
    request only scopes the accrual summary totals.
    """

    period: PeriodRequest
    generated_for: datetime
    cash: CashSummary
    revenue_by_type: Mapping[str, TypeBucket]
    monthly_revenue: Mapping[MonthKey, Money]
    accrual_monthly_revenue: Mapping[MonthKey, Money]
    occupancy_by_month: Mapping[MonthKey, int]
    accrual_summary: AccrualSummary
    accrual_timeline: Mapping[MonthKey, Money]
    occupancy_timeline: Mapping[MonthKey, int]
    recent_payments: tuple[Payment, ...] = field(default_factory=tuple)


def _frozen(d: dict) -> Mapping:
    return MappingProxyType(dict(d))


def _as_now(now: Any) -> datetime:
    if isinstance(now, datetime):
        return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)
    d = as_utc_date(now)
    if d is None:
        raise ValueError("now must be a date or datetime")
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


# -------------------- Cash basis --------------------

def summarize_cash(payments: list[Payment]) -> CashSummary:
    total = money_sum(Money(p.amount) for p in payments)
    net = money_sum(Money(p.amount - p.fee) for p in payments)
    fees = money_sum(Money(p.fee) for p in payments)
    refunds = money_sum(Money(abs(p.amount)) for p in payments if p.is_refund)
    count = len(payments)
    return CashSummary(
        total_revenue=total,
        net_revenue=net,
        total_fees=fees,
        refunds_total=refunds,
        payment_count=count,
        average_payment=(total.cents / count) if count else 0.0,
    )


def revenue_by_type(payments: list[Payment]) -> dict[str, TypeBucket]:
    out: dict[str, TypeBucket] = {}
    for p in payments:
        b = out.get(p.type.value, TypeBucket())
        out[p.type.value] = TypeBucket(count=b.count + 1, amount=b.amount + p.amount)
    return out


def cash_timeline(payments: list[Payment], window: list[MonthKey]) -> dict[MonthKey, Money]:
    out: dict[MonthKey, Money] = {k: Money.zero() for k in window}
    for p in payments:
        d = as_utc_date(p.paid_at)
        if d is None:
            continue
        key = month_key(d)
        if key in out:
            out[key] = out[key] + p.amount
    return out


def recent_payments(payments: list[Payment], limit: int) -> tuple[Payment, ...]:
    dated = [p for p in payments if p.paid_at is not None]
    undated = [p for p in payments if p.paid_at is None]
    dated.sort(key=lambda p: _as_now(p.paid_at), reverse=True)
    return tuple((dated + undated)[: max(0, int(limit))])


# -------------------- Accrual basis --------------------

def accrual_timelines(leases: list[Lease]) -> tuple[dict[MonthKey, Money], dict[MonthKey, int]]:
    earned: dict[MonthKey, Money] = {}
    nights: dict[MonthKey, int] = {}
    for lease in leases:
        alloc = allocate(lease)
        for key, cents in alloc.earned.items():
            earned[key] = earned.get(key, Money.zero()) + cents
        for key, n in alloc.nights.items():
            nights[key] = nights.get(key, 0) + n
    return dict(sorted(earned.items())), dict(sorted(nights.items()))


def _period_totals(
    period: PeriodRequest,
    earned: Mapping[MonthKey, Money],
    nights: Mapping[MonthKey, int],
) -> tuple[Money, int, int]:
    total = Money.zero()
    occupied = 0
    covered: set[MonthKey] = set()

    for key, cents in earned.items():
        if period.matches(key):
            total = total + cents
            covered.add(key)
    for key, n in nights.items():
        if period.matches(key):
            occupied += n
            covered.add(key)

    months = len(covered) or period.fallback_months(len(earned))
    return total, occupied, months


# -------------------- Merge --------------------

def aggregate(
    payments: Iterable[Any],
    leases: Iterable[Any],
    refund_records: Optional[Iterable[Any]] = None,
    period: Optional[PeriodRequest] = None,
    *,
    now: Any,
    cash_window_months: int = CASH_WINDOW_MONTHS,
    recent_limit: int = RECENT_PAYMENTS_LIMIT,
) -> RevenueSummary:
    """
    Build the revenue summary from fetched snapshots.

    - payments: every payment row (any status); only succeeded rows count
    - leases: lease rows; malformed ones contribute nothing
    - refund_records: rows searched for deposit refunds (defaults to payments)
    - period: scopes the accrual totals only (defaults to all-time)
    - now: injected wall clock; drives the cash window, deposit status and upcoming revenue

    Pure: no I/O, no clock reads, no mutation of inputs.
    """
    now_at = _as_now(now)
    period = period or PeriodRequest()

    all_payments = [Payment.from_row(p) for p in payments]
    succeeded = [p for p in all_payments if p.succeeded]
    lease_rows = [Lease.from_row(l) for l in leases]
    refund_rows = all_payments if refund_records is None else [Payment.from_row(r) for r in refund_records]

    # Cash basis
    window = trailing_month_keys(now_at, cash_window_months)
    cash = summarize_cash(succeeded)
    by_type = revenue_by_type(succeeded)
    monthly = cash_timeline(succeeded, window)

    # Accrual basis (global, unfiltered)
    earned, nights = accrual_timelines(lease_rows)
    deposits = sum_deposits(lease_rows, deposit_refunds_by_lease(refund_rows), now_at)

    # Period projection
    total_earned, occupied, months = _period_totals(period, earned, nights)
    current_key = month_key(now_at.astimezone(timezone.utc).date())
    upcoming = money_sum(cents for key, cents in earned.items() if key > current_key)

    accrual = AccrualSummary(
        total_earned=total_earned,
        occupied_nights=occupied,
        average_monthly_earned=Money(div_round_half_up(total_earned.cents, months)),
        average_nightly_rate=Money(div_round_half_up(total_earned.cents, occupied)),
        months_in_period=months,
        outstanding_deposits=deposits.outstanding,
        released_deposits=deposits.released,
        upcoming_revenue=upcoming,
    )

    log.info(
        "revenue summary built: payments=%d succeeded=%d leases=%d accrual_months=%d",
        len(all_payments),
        len(succeeded),
        len(lease_rows),
        len(earned),
        extra={"period": period.tag},
    )

    return RevenueSummary(
        period=period,
        generated_for=now_at,
        cash=cash,
        revenue_by_type=_frozen(by_type),
        monthly_revenue=_frozen(monthly),
        accrual_monthly_revenue=_frozen({k: earned.get(k, Money.zero()) for k in window}),
        occupancy_by_month=_frozen({k: nights.get(k, 0) for k in window}),
        accrual_summary=accrual,
        accrual_timeline=_frozen(earned),
        occupancy_timeline=_frozen(nights),
        recent_payments=recent_payments(succeeded, recent_limit),
    )
