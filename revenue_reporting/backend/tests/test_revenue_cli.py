# backend/tests/test_revenue_cli.py
from __future__ import annotations

import json

import pytest

from app.cli.__main__ import main


@pytest.fixture(autouse=True)
def _no_log_handlers(monkeypatch):
    # main() would attach a handler to the captured stderr
    monkeypatch.setattr("app.cli.__main__.configure_logging", lambda **kw: None)


def _write(tmp_path, name, rows):
    p = tmp_path / name
    p.write_text(json.dumps(rows), encoding="utf-8")
    return str(p)


def test_cli_prints_json_summary(tmp_path, capsys):
    payments = _write(
        tmp_path,
        "payments.json",
        [
            {"amount": 10000, "type": "rent", "status": "succeeded", "paidAt": "2024-06-01T09:00:00Z"},
            {"amount": -30000, "type": "refund", "status": "succeeded", "refundCategory": "deposit", "leaseId": 7},
        ],
    )
    leases = _write(
        tmp_path,
        "leases.json",
        [{"id": 7, "startDate": "2024-06-01", "endDate": "2024-08-31", "monthlyRent": 2000, "depositAmount": 1000}],
    )

    rc = main(["--payments", payments, "--leases", leases, "--now", "2024-06-15T12:00:00+00:00"])
    assert rc == 0

    data = json.loads(capsys.readouterr().out)
    assert data["summary"]["totalRevenue"] == -20000
    assert data["accrualSummary"]["upcomingRevenue"] == 400000
    assert data["accrualSummary"]["outstandingDeposits"] == 70000
    assert data["accrualSummary"]["releasedDeposits"] == 30000


def test_cli_csv_with_period(tmp_path, capsys):
    payments = _write(tmp_path, "payments.json", [])
    leases = _write(
        tmp_path,
        "leases.json",
        [{"id": "a", "startDate": "2024-01-15", "endDate": "2024-02-10", "monthlyRent": "1000"}],
    )

    rc = main(
        [
            "--payments", payments,
            "--leases", leases,
            "--period", "month", "--year", "2024", "--month", "1",
            "--now", "2024-06-15T12:00:00+00:00",
            "--csv",
        ]
    )
    assert rc == 0

    out = capsys.readouterr().out
    assert out.startswith("Month,Cash Collected (USD),Accrual Rent (USD),Occupancy Nights\n")
    assert "Totals,0.00,548.39,17" in out.split("\n")


def test_cli_reports_bad_input(tmp_path, capsys):
    leases = _write(tmp_path, "leases.json", {"not": "a list"})

    rc = main(["--payments", str(tmp_path / "missing.json"), "--leases", leases])
    assert rc == 2
    assert "missing input file" in capsys.readouterr().err

    payments = _write(tmp_path, "payments.json", [])
    rc = main(["--payments", payments, "--leases", leases])
    assert rc == 2
    assert "expected a JSON list" in capsys.readouterr().err


def test_cli_accepts_z_suffixed_now_and_legacy_rows(tmp_path, capsys):
    payments = _write(
        tmp_path,
        "payments.json",
        [{"amount": 10000, "paymentType": "rent", "status": "succeeded", "paidAt": "2024-06-01T09:00:00.000Z"}],
    )
    leases = _write(
        tmp_path,
        "leases.json",
        [{"_id": "a", "leaseStartDate": "2024-01-15T05:00:00.000Z", "leaseEndDate": "2024-02-10", "rentalAmount": 1000}],
    )

    rc = main(["--payments", payments, "--leases", leases, "--now", "2024-06-15T12:00:00Z"])
    assert rc == 0

    data = json.loads(capsys.readouterr().out)
    assert data["generatedFor"].startswith("2024-06-15T12:00:00")
    assert data["revenueByType"] == {"rent": {"count": 1, "amount": 10000}}
    assert data["monthlyRevenue"]["2024-06"] == 10000
    assert data["accrualTimeline"] == {"2024-01": 54839, "2024-02": 34483}


def test_cli_rejects_unparseable_now(tmp_path, capsys):
    payments = _write(tmp_path, "payments.json", [])
    leases = _write(tmp_path, "leases.json", [])

    with pytest.raises(SystemExit) as exc:
        main(["--payments", payments, "--leases", leases, "--now", "yesterday"])
    assert exc.value.code == 2
    assert "not an ISO-8601 instant" in capsys.readouterr().err
