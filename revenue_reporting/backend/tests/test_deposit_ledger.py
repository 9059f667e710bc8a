# backend/tests/test_deposit_ledger.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from app.domain.deposits import DepositState, classify, deposit_refunds_by_lease, sum_deposits
from app.domain.money import Money

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@dataclass
class L:
    id: str
    start_date: date
    end_date: Optional[date]
    monthly_rent: float = 1000.0
    deposit_amount: float = 10.0


@dataclass
class P:
    amount: int
    type: str = "refund"
    status: str = "succeeded"
    refund_category: Optional[str] = "deposit"
    lease_id: Optional[str] = "L1"
    refund_amount: Optional[int] = None


def test_future_lease_deposit_is_outstanding():
    s = classify(L("L1", date(2024, 6, 1), date(2024, 12, 31)), None, NOW)
    assert s == DepositState(outstanding=Money(1000), released=Money(0))


def test_ended_lease_deposit_is_released_without_refund_row():
    s = classify(L("L1", date(2024, 1, 1), date(2024, 1, 31)), None, NOW)
    assert s == DepositState(outstanding=Money(0), released=Money(1000))


def test_lease_ending_today_is_released():
    s = classify(L("L1", date(2024, 1, 1), date(2024, 6, 15)), None, NOW)
    assert s.outstanding == Money(0)
    assert s.released == Money(1000)


def test_partial_refund_splits_deposit():
    s = classify(L("L1", date(2024, 6, 1), date(2024, 12, 31)), Money(400), NOW)
    assert s.outstanding == Money(600)
    assert s.released == Money(400)


def test_refund_larger_than_deposit_is_capped():
    s = classify(L("L1", date(2024, 6, 1), date(2024, 12, 31)), 1500, NOW)
    assert s.outstanding == Money(0)
    assert s.released == Money(1000)


def test_no_deposit_contributes_nothing():
    lease = L("L1", date(2024, 6, 1), date(2024, 12, 31), deposit_amount=0.0)
    assert classify(lease, Money(500), NOW) == DepositState()


def test_missing_end_date_only_releases_refunds():
    s = classify(L("L1", date(2024, 6, 1), None), Money(250), NOW)
    assert s == DepositState(outstanding=Money(0), released=Money(250))


def test_refunds_by_lease_only_counts_succeeded_linked_deposit_refunds():
    rows = [
        P(-300),
        P(-200),
        P(-999, status="failed"),
        P(-999, refund_category="rent"),
        P(-999, lease_id=None),
        P(999, type="rent", refund_category=None),
        P(0, refund_amount=50),
        P(-70, lease_id="L2"),
    ]
    out = deposit_refunds_by_lease(rows)
    assert out == {"L1": Money(550), "L2": Money(70)}


def test_sum_deposits_across_leases():
    leases = [
        L("L1", date(2024, 6, 1), date(2024, 12, 31), deposit_amount=500.0),
        L("L2", date(2023, 1, 1), date(2023, 12, 31), deposit_amount=300.0),
        L("L3", date(2024, 7, 1), date(2025, 6, 30), deposit_amount=0.0),
    ]
    total = sum_deposits(leases, {"L1": Money(10000)}, NOW)
    assert total.outstanding == Money(40000)
    assert total.released == Money(10000 + 30000)


def test_unusable_now_is_rejected():
    lease = L("L1", date(2024, 6, 1), date(2024, 12, 31))
    with pytest.raises(ValueError):
        classify(lease, None, "not-a-date")
    with pytest.raises(ValueError):
        classify(lease, Money(400), None)
