# backend/app/schemas.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .domain.periods import PeriodRequest, as_utc_date
from .domain.records import Lease, Payment
from .domain.revenue import RevenueSummary


class _Camel(BaseModel):
    # field names on the wire match the dashboard contract (camelCase); snake_case also accepted
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------------------- Snapshots in --------------------

def _names(*names: str) -> AliasChoices:
    # accepted input names, in lookup order; payment/booking exports use the legacy ones
    return AliasChoices(*names)


class PaymentIn(_Camel):
    id: Optional[Union[str, int]] = Field(default=None, validation_alias=_names("id", "_id"))
    amount: int
    fee: int = Field(default=0, validation_alias=_names("fee", "credit_card_fee", "creditCardFee"))
    type: str = Field(default="other", validation_alias=_names("type", "payment_type", "paymentType"))
    status: str = "pending"
    paid_at: Optional[datetime] = Field(default=None, validation_alias=_names("paid_at", "paidAt"))
    refund_category: Optional[str] = Field(
        default=None, validation_alias=_names("refund_category", "refundCategory")
    )
    lease_id: Optional[Union[str, int]] = Field(
        default=None,
        validation_alias=_names("lease_id", "leaseId", "application_id", "applicationId"),
    )
    refund_amount: Optional[int] = Field(default=None, validation_alias=_names("refund_amount", "refundAmount"))
    description: Optional[str] = None

    def to_record(self) -> Payment:
        return Payment.from_row(self.model_dump())


class LeaseIn(_Camel):
    id: Optional[Union[str, int]] = Field(default=None, validation_alias=_names("id", "_id"))
    start_date: Optional[date] = Field(
        default=None,
        validation_alias=_names("start_date", "startDate", "lease_start_date", "leaseStartDate"),
    )
    end_date: Optional[date] = Field(
        default=None,
        validation_alias=_names("end_date", "endDate", "lease_end_date", "leaseEndDate"),
    )
    requested_start_date: Optional[date] = Field(
        default=None, validation_alias=_names("requested_start_date", "requestedStartDate")
    )
    requested_end_date: Optional[date] = Field(
        default=None, validation_alias=_names("requested_end_date", "requestedEndDate")
    )
    monthly_rent: Decimal = Field(
        default=Decimal(0),
        validation_alias=_names("monthly_rent", "monthlyRent", "rental_amount", "rentalAmount"),
    )
    deposit_amount: Decimal = Field(
        default=Decimal(0), validation_alias=_names("deposit_amount", "depositAmount")
    )

    @field_validator("start_date", "end_date", "requested_start_date", "requested_end_date", mode="before")
    @classmethod
    def _instant_to_utc_date(cls, v):
        # stored lease dates are often full instants ("2024-01-15T05:00:00.000Z")
        if v is None:
            return v
        d = as_utc_date(v)
        return d if d is not None else v

    def to_record(self) -> Lease:
        return Lease.from_row(self.model_dump())


class RevenueSnapshotIn(_Camel):
    payments: list[PaymentIn] = Field(default_factory=list)
    leases: list[LeaseIn] = Field(default_factory=list)

    # rows searched for deposit refunds; defaults to `payments`
    refund_records: Optional[list[PaymentIn]] = None


# -------------------- Summary out --------------------

class CashSummaryOut(_Camel):
    total_revenue: int
    net_revenue: int
    total_fees: int
    refunds_total: int
    payment_count: int
    average_payment: float


class TypeBucketOut(_Camel):
    count: int
    amount: int


class AccrualSummaryOut(_Camel):
    total_earned: int
    occupied_nights: int
    average_monthly_earned: int
    average_nightly_rate: int
    months_in_period: int
    outstanding_deposits: int
    released_deposits: int
    upcoming_revenue: int


class PeriodOut(_Camel):
    type: str
    year: Optional[int] = None
    month: Optional[int] = None

    @classmethod
    def from_period(cls, p: PeriodRequest) -> "PeriodOut":
        return cls(type=p.kind.value, year=p.year, month=p.month)


class PaymentOut(_Camel):
    id: Optional[str] = None
    amount: int
    fee: int
    payment_type: str
    status: str
    paid_at: Optional[datetime] = None
    refund_category: Optional[str] = None
    lease_id: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_record(cls, p: Payment) -> "PaymentOut":
        return cls(
            id=p.id,
            amount=p.amount,
            fee=p.fee,
            payment_type=p.type.value,
            status=p.status.value,
            paid_at=p.paid_at,
            refund_category=p.refund_category.value if p.refund_category else None,
            lease_id=p.lease_id,
            description=p.description,
        )


class RevenueSummaryOut(_Camel):
    summary: CashSummaryOut
    revenue_by_type: dict[str, TypeBucketOut]
    monthly_revenue: dict[str, int]
    accrual_monthly_revenue: dict[str, int]
    occupancy_by_month: dict[str, int]
    accrual_summary: AccrualSummaryOut
    accrual_timeline: dict[str, int]
    occupancy_timeline: dict[str, int]
    period: PeriodOut
    generated_for: datetime
    payments: list[PaymentOut]

    @classmethod
    def from_summary(cls, s: RevenueSummary) -> "RevenueSummaryOut":
        c = s.cash
        a = s.accrual_summary
        return cls(
            summary=CashSummaryOut(
                total_revenue=c.total_revenue.cents,
                net_revenue=c.net_revenue.cents,
                total_fees=c.total_fees.cents,
                refunds_total=c.refunds_total.cents,
                payment_count=c.payment_count,
                average_payment=c.average_payment,
            ),
            revenue_by_type={
                k: TypeBucketOut(count=b.count, amount=b.amount.cents) for k, b in s.revenue_by_type.items()
            },
            monthly_revenue={k: v.cents for k, v in s.monthly_revenue.items()},
            accrual_monthly_revenue={k: v.cents for k, v in s.accrual_monthly_revenue.items()},
            occupancy_by_month=dict(s.occupancy_by_month),
            accrual_summary=AccrualSummaryOut(
                total_earned=a.total_earned.cents,
                occupied_nights=a.occupied_nights,
                average_monthly_earned=a.average_monthly_earned.cents,
                average_nightly_rate=a.average_nightly_rate.cents,
                months_in_period=a.months_in_period,
                outstanding_deposits=a.outstanding_deposits.cents,
                released_deposits=a.released_deposits.cents,
                upcoming_revenue=a.upcoming_revenue.cents,
            ),
            accrual_timeline={k: v.cents for k, v in s.accrual_timeline.items()},
            occupancy_timeline=dict(s.occupancy_timeline),
            period=PeriodOut.from_period(s.period),
            generated_for=s.generated_for,
            payments=[PaymentOut.from_record(p) for p in s.recent_payments],
        )
