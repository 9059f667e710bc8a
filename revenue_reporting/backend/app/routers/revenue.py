# backend/app/routers/revenue.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import Response

from ..config import settings
from ..domain.export import export_filename, summary_csv
from ..domain.periods import PeriodRequest
from ..domain.revenue import RevenueSummary, aggregate
from ..schemas import RevenueSnapshotIn, RevenueSummaryOut

router = APIRouter(prefix="/revenue", tags=["revenue"])


def _build_summary(
    request: Request,
    body: RevenueSnapshotIn,
    period: str,
    year: Optional[str],
    month: Optional[str],
    now: Optional[datetime],
) -> RevenueSummary:
    # year/month stay strings so a malformed value degrades to all-time instead of a 422
    req = PeriodRequest.normalize(period, year, month)
    # picked up by the request log line
    request.state.report_period = req.tag
    refunds = None if body.refund_records is None else [r.to_record() for r in body.refund_records]
    return aggregate(
        [p.to_record() for p in body.payments],
        [l.to_record() for l in body.leases],
        refunds,
        req,
        now=now or datetime.now(timezone.utc),
        cash_window_months=settings.cash_window_months,
        recent_limit=settings.recent_payments_limit,
    )


@router.post("/summary", response_model=RevenueSummaryOut)
def revenue_summary(
    request: Request,
    body: RevenueSnapshotIn,
    period: str = Query(default="all", description="all|year|month"),
    year: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None, description="1-12"),
    now: Optional[datetime] = Query(default=None, description="ISO instant; defaults to server time"),
):
    """
    Cash + accrual revenue summary over the posted payment/lease snapshots.

    The period only scopes the accrual totals; the cash series is always the
    trailing window ending at `now`.
    """
    s = _build_summary(request, body, period, year, month, now)
    return RevenueSummaryOut.from_summary(s)


@router.post("/summary.csv")
def revenue_summary_csv(
    request: Request,
    body: RevenueSnapshotIn,
    period: str = Query(default="all", description="all|year|month"),
    year: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None, description="1-12"),
    now: Optional[datetime] = Query(default=None, description="ISO instant; defaults to server time"),
):
    s = _build_summary(request, body, period, year, month, now)
    return Response(
        content=summary_csv(s),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(s)}"'},
    )
