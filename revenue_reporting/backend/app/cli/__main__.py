# backend/app/cli/__main__.py
from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone

from pydantic import ValidationError

from app.cli.report import ReportInputError, build_report
from app.logging_config import configure_logging


def _parse_now(value: str) -> datetime:
    """--now: ISO date or instant; a trailing Z means UTC, naive values are taken as UTC."""
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 instant: {value!r}")
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="python -m app.cli", description="Cash + accrual revenue report")
    p.add_argument("--payments", required=True, help="JSON list of payment rows")
    p.add_argument("--leases", required=True, help="JSON list of lease rows")
    p.add_argument("--refunds", default=None, help="JSON list of refund rows (defaults to payments)")
    p.add_argument("--period", default="all", choices=["all", "year", "month"])
    p.add_argument("--year", default=None)
    p.add_argument("--month", default=None)
    p.add_argument("--now", default=None, type=_parse_now, help="ISO instant (default: now, UTC)")
    p.add_argument("--csv", action="store_true", help="emit the CSV export instead of JSON")
    args = p.parse_args(argv)

    # report goes to stdout; keep log lines off it
    configure_logging(stream=sys.stderr)

    try:
        out = build_report(
            payments_path=args.payments,
            leases_path=args.leases,
            refunds_path=args.refunds,
            period=args.period,
            year=args.year,
            month=args.month,
            now=args.now,
            as_csv=args.csv,
        )
    except (ReportInputError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    sys.stdout.write(out if out.endswith("\n") else out + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
