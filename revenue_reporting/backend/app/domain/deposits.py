# backend/app/domain/deposits.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from .money import Money
from .periods import as_utc_date
from .records import Lease, Payment


@dataclass(frozen=True)
class DepositState:
    outstanding: Money = Money(0)
    released: Money = Money(0)

    def __add__(self, other: "DepositState") -> "DepositState":
        return DepositState(
            outstanding=self.outstanding + other.outstanding,
            released=self.released + other.released,
        )


def deposit_refunds_by_lease(refund_records: Iterable[Any]) -> dict[str, Money]:
    """
    Sum |amount| of succeeded deposit refunds per lease id.

    Unlinked refunds cannot be matched and are ignored here (they still
    count in cash totals).
    """
    out: dict[str, Money] = {}
    for row in refund_records:
        p = Payment.from_row(row)
        if not p.succeeded or not p.is_deposit_refund or p.lease_id is None:
            continue
        out[p.lease_id] = out.get(p.lease_id, Money.zero()) + Money(p.refunded_cents)
    return out


def classify(lease: Any, refunded: Any, now: Any) -> DepositState:
    """
    Split a lease's deposit into outstanding vs. released.

    - refunds (capped at the deposit) are released
    - the rest is outstanding while the lease ends after `now`
    - once the term is over, the rest counts as released even without a refund row
    """
    lease = Lease.from_row(lease)
    deposit = lease.deposit_cents
    if deposit.cents <= 0:
        return DepositState()

    refunded_m = Money.of(refunded or 0)
    applied = min(refunded_m, deposit)
    held = Money(max(0, (deposit - applied).cents))

    today = as_utc_date(now)
    if today is None:
        raise ValueError("now must be a date or datetime")

    end = lease.effective_end
    if end is None:
        return DepositState(released=applied)
    if end > today:
        return DepositState(outstanding=held, released=applied)
    return DepositState(released=applied + held)


def sum_deposits(
    leases: Iterable[Any],
    refunds_by_lease: Mapping[str, Money],
    now: Any,
) -> DepositState:
    total = DepositState()
    for row in leases:
        lease = Lease.from_row(row)
        refunded: Optional[Money] = refunds_by_lease.get(lease.id) if lease.id is not None else None
        total = total + classify(lease, refunded, now)
    return total
