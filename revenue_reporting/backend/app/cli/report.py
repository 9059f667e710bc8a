# backend/app/cli/report.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from app.config import settings
from app.domain.export import summary_csv
from app.domain.periods import PeriodRequest
from app.domain.revenue import aggregate
from app.schemas import LeaseIn, PaymentIn, RevenueSummaryOut


class ReportInputError(Exception):
    pass


def _load_rows(path: Optional[str]) -> Optional[list[dict[str, Any]]]:
    if path is None:
        return None
    p = Path(path)
    if not p.exists():
        raise ReportInputError(f"missing input file: {path}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ReportInputError(f"{path}: invalid JSON ({e.msg})") from e
    if not isinstance(data, list):
        raise ReportInputError(f"{path}: expected a JSON list of rows")
    return data


def build_report(
    *,
    payments_path: str,
    leases_path: str,
    refunds_path: Optional[str] = None,
    period: str = "all",
    year: Optional[str] = None,
    month: Optional[str] = None,
    now: Optional[datetime] = None,
    as_csv: bool = False,
) -> str:
    payments = [PaymentIn.model_validate(r).to_record() for r in _load_rows(payments_path) or []]
    leases = [LeaseIn.model_validate(r).to_record() for r in _load_rows(leases_path) or []]
    refund_rows = _load_rows(refunds_path)
    refunds = None if refund_rows is None else [PaymentIn.model_validate(r).to_record() for r in refund_rows]

    s = aggregate(
        payments,
        leases,
        refunds,
        PeriodRequest.normalize(period, year, month),
        now=now or datetime.now(timezone.utc),
        cash_window_months=settings.cash_window_months,
        recent_limit=settings.recent_payments_limit,
    )
    if as_csv:
        return summary_csv(s)
    return RevenueSummaryOut.from_summary(s).model_dump_json(by_alias=True, indent=2)
