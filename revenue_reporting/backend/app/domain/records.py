# backend/app/domain/records.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from .money import Money, round_half_up
from .periods import as_utc_date


class PaymentType(str, Enum):
    DEPOSIT = "deposit"
    RENT = "rent"
    LATE_FEE = "late_fee"
    DEPOSIT_TRANSFER = "deposit_transfer"
    ADMIN_TRANSFER = "admin_transfer"
    REFUND = "refund"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Any) -> "PaymentType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.OTHER


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: Any) -> "PaymentStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class RefundCategory(str, Enum):
    DEPOSIT = "deposit"
    RENT = "rent"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Any) -> Optional["RefundCategory"]:
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


# -------------------- Row coercion --------------------

def _field(row: Any, *names: str) -> Any:
    """First non-None value among names, from a mapping or an attribute-bearing object."""
    for name in names:
        if isinstance(row, dict):
            v = row.get(name)
        else:
            v = getattr(row, name, None)
        if v is not None:
            return v
    return None


def _as_cents(v: Any) -> int:
    if v is None:
        return 0
    if isinstance(v, Money):
        return v.cents
    return round_half_up(v)


def _as_decimal(v: Any) -> Decimal:
    if v is None or v == "":
        return Decimal(0)
    try:
        return v if isinstance(v, Decimal) else Decimal(str(v))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal(0)


def _as_instant(v: Any) -> Optional[datetime]:
    if v is None:
        return None
    if isinstance(v, datetime):
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)
    if isinstance(v, date):
        return datetime(v.year, v.month, v.day, tzinfo=timezone.utc)
    if isinstance(v, str) and v.strip():
        try:
            return _as_instant(datetime.fromisoformat(v.strip().replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def _as_id(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


# -------------------- Records --------------------

@dataclass(frozen=True)
class Payment:
    """A payment row as fetched by the host. amount/fee are integer cents; refunds are negative."""

    amount: int
    type: PaymentType = PaymentType.OTHER
    status: PaymentStatus = PaymentStatus.PENDING
    fee: int = 0
    paid_at: Optional[datetime] = None
    refund_category: Optional[RefundCategory] = None
    lease_id: Optional[str] = None
    refund_amount: Optional[int] = None
    id: Optional[str] = None
    description: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is PaymentStatus.SUCCEEDED

    @property
    def is_refund(self) -> bool:
        return self.type is PaymentType.REFUND or self.amount < 0

    @property
    def is_deposit_refund(self) -> bool:
        return self.type is PaymentType.REFUND and self.refund_category is RefundCategory.DEPOSIT

    @property
    def refunded_cents(self) -> int:
        # amount first; refund_amount only when amount carries nothing
        return abs(self.amount or self.refund_amount or 0)

    @classmethod
    def from_row(cls, row: Any) -> "Payment":
        if isinstance(row, cls):
            return row
        return cls(
            amount=_as_cents(_field(row, "amount")),
            type=PaymentType.coerce(_field(row, "type", "payment_type", "paymentType")),
            status=PaymentStatus.coerce(_field(row, "status")),
            fee=_as_cents(_field(row, "fee", "credit_card_fee", "creditCardFee")),
            paid_at=_as_instant(_field(row, "paid_at", "paidAt")),
            refund_category=RefundCategory.coerce(_field(row, "refund_category", "refundCategory")),
            lease_id=_as_id(_field(row, "lease_id", "leaseId", "application_id", "applicationId")),
            refund_amount=(
                _as_cents(_field(row, "refund_amount", "refundAmount"))
                if _field(row, "refund_amount", "refundAmount") is not None
                else None
            ),
            id=_as_id(_field(row, "id", "_id")),
            description=_field(row, "description"),
        )


@dataclass(frozen=True)
class Lease:
    """
    A lease snapshot. Rent and deposit are decimal currency units.

    requested_* dates stand in when the signed lease dates are absent.
    """

    id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_rent: Decimal = Decimal(0)
    deposit_amount: Decimal = Decimal(0)
    requested_start_date: Optional[date] = None
    requested_end_date: Optional[date] = None

    @property
    def effective_start(self) -> Optional[date]:
        return self.start_date or self.requested_start_date

    @property
    def effective_end(self) -> Optional[date]:
        return self.end_date or self.requested_end_date

    @property
    def monthly_rent_cents(self) -> Money:
        return Money.from_decimal(self.monthly_rent)

    @property
    def deposit_cents(self) -> Money:
        return Money.from_decimal(self.deposit_amount)

    @classmethod
    def from_row(cls, row: Any) -> "Lease":
        if isinstance(row, cls):
            return row
        return cls(
            id=_as_id(_field(row, "id", "_id")),
            start_date=as_utc_date(_field(row, "start_date", "startDate", "lease_start_date", "leaseStartDate")),
            end_date=as_utc_date(_field(row, "end_date", "endDate", "lease_end_date", "leaseEndDate")),
            monthly_rent=_as_decimal(_field(row, "monthly_rent", "monthlyRent", "rental_amount", "rentalAmount")),
            deposit_amount=_as_decimal(_field(row, "deposit_amount", "depositAmount")),
            requested_start_date=as_utc_date(_field(row, "requested_start_date", "requestedStartDate")),
            requested_end_date=as_utc_date(_field(row, "requested_end_date", "requestedEndDate")),
        )
