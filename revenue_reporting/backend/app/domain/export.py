# backend/app/domain/export.py
from __future__ import annotations

import csv
import io
from datetime import date, timezone

from .money import Money
from .periods import MonthKey, parse_month_key
from .revenue import RevenueSummary

CSV_HEADER = ["Month", "Cash Collected (USD)", "Accrual Rent (USD)", "Occupancy Nights"]

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def month_label(key: MonthKey) -> str:
    """'2024-03' -> 'Mar 2024'. Keys that don't parse are returned as-is."""
    try:
        y, m = parse_month_key(key)
        date(y, m, 1)
    except ValueError:
        return key
    return f"{_MONTH_ABBR[m - 1]} {y}"


def summary_rows(summary: RevenueSummary) -> list[list[str]]:
    months = sorted(set(summary.monthly_revenue) | set(summary.accrual_timeline))

    rows: list[list[str]] = [list(CSV_HEADER)]
    for key in months:
        cash = summary.monthly_revenue.get(key, Money.zero())
        accrual = summary.accrual_timeline.get(key, Money.zero())
        nights = summary.occupancy_timeline.get(key, 0)
        rows.append([month_label(key), cash.format(), accrual.format(), str(nights)])

    acc = summary.accrual_summary
    rows.append([])
    rows.append(["Totals", summary.cash.total_revenue.format(), acc.total_earned.format(), str(acc.occupied_nights)])
    rows.append(["Outstanding Deposits", acc.outstanding_deposits.format(), "", ""])
    rows.append(["Released Deposits", acc.released_deposits.format(), "", ""])
    rows.append(["Upcoming Revenue", acc.upcoming_revenue.format(), "", ""])
    return rows


def summary_csv(summary: RevenueSummary) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerows(summary_rows(summary))
    return output.getvalue()


def export_filename(summary: RevenueSummary) -> str:
    stamp = summary.generated_for.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"revenue-{summary.period.kind.value}-{stamp}.csv"
