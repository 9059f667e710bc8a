# backend/app/domain/__init__.py
from .money import Money
from .periods import PeriodKind, PeriodRequest, make_filter
from .records import Lease, Payment, PaymentStatus, PaymentType, RefundCategory
from .accrual import Allocation, allocate
from .deposits import DepositState, classify, deposit_refunds_by_lease
from .revenue import RevenueSummary, aggregate

__all__ = [
    "Money",
    "PeriodKind",
    "PeriodRequest",
    "make_filter",
    "Lease",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "RefundCategory",
    "Allocation",
    "allocate",
    "DepositState",
    "classify",
    "deposit_refunds_by_lease",
    "RevenueSummary",
    "aggregate",
]
