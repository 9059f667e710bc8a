# backend/tests/test_period_filter.py
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from app.domain.periods import (
    PeriodKind,
    PeriodRequest,
    as_utc_date,
    iter_month_keys,
    make_filter,
    month_bounds,
    trailing_month_keys,
)


def test_month_filter_accepts_only_that_month():
    f = make_filter("month", 2024, 3)
    assert f("2024-03")
    assert not f("2024-04")
    assert not f("2023-03")


def test_year_filter_matches_year_component():
    f = make_filter("year", "2024", None)
    assert f("2024-01")
    assert f("2024-12")
    assert not f("2023-12")
    assert not f("2025-01")


def test_all_filter_accepts_everything():
    f = make_filter("all")
    assert f("1999-01")
    assert f("2099-12")


def test_malformed_requests_degrade_to_all():
    assert PeriodRequest.normalize("year", None, None).kind is PeriodKind.ALL
    assert PeriodRequest.normalize("year", "abc", None).kind is PeriodKind.ALL
    assert PeriodRequest.normalize("month", 2024, None).kind is PeriodKind.ALL
    assert PeriodRequest.normalize("month", 2024, 13).kind is PeriodKind.ALL
    assert PeriodRequest.normalize("quarter", 2024, 1).kind is PeriodKind.ALL
    assert PeriodRequest.normalize(None).kind is PeriodKind.ALL

    f = make_filter("month", 2024, "x")
    assert f("2001-07")


def test_normalize_parses_string_inputs():
    p = PeriodRequest.normalize("MONTH", "2024", "3")
    assert p == PeriodRequest(PeriodKind.MONTH, 2024, 3)
    assert p.month_key == "2024-03"

    y = PeriodRequest.normalize(PeriodKind.YEAR, 2023, 7)
    assert y == PeriodRequest(PeriodKind.YEAR, 2023, None)


def test_fallback_months():
    assert PeriodRequest(PeriodKind.MONTH, 2024, 3).fallback_months(9) == 1
    assert PeriodRequest(PeriodKind.YEAR, 2024).fallback_months(9) == 12
    assert PeriodRequest().fallback_months(9) == 9
    assert PeriodRequest().fallback_months(0) == 1


def test_period_tags():
    assert PeriodRequest().tag == "all"
    assert PeriodRequest(PeriodKind.YEAR, 2024).tag == "2024"
    assert PeriodRequest(PeriodKind.MONTH, 2024, 2).tag == "2024-02"
    assert PeriodRequest.normalize("month", 2024, 13).tag == "all"


def test_month_helpers():
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds("2023-02") == (date(2023, 2, 1), date(2023, 2, 28))
    assert list(iter_month_keys(date(2023, 11, 30), date(2024, 2, 1))) == [
        "2023-11",
        "2023-12",
        "2024-01",
        "2024-02",
    ]


def test_trailing_window_ends_at_current_month():
    keys = trailing_month_keys(datetime(2024, 3, 10, tzinfo=timezone.utc), 12)
    assert len(keys) == 12
    assert keys[0] == "2023-04"
    assert keys[-1] == "2024-03"
    assert keys == sorted(keys)


def test_as_utc_date_converts_aware_instants():
    late_evening_west = datetime(2024, 1, 31, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert as_utc_date(late_evening_west) == date(2024, 2, 1)
    assert as_utc_date("2024-01-15") == date(2024, 1, 15)
    assert as_utc_date("2024-01-15T23:30:00Z") == date(2024, 1, 15)
    assert as_utc_date("not a date") is None
    assert as_utc_date(None) is None
