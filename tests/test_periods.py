import sqlite3
from datetime import date

import pytest

import mm_ledger.periods as periods
from mm_ledger.errors import InvalidDate
from mm_ledger.periods import DateGranularity, TimeWindow


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024", periods.ParsedDate(DateGranularity.YEAR, 2024)),
        ("2024-03", periods.ParsedDate(DateGranularity.MONTH, 2024, 3)),
        ("2024-03-15", periods.ParsedDate(DateGranularity.FULL_DATE, 2024, 3, 15)),
    ],
)
def test_parse_date_string_granularities(text, expected) -> None:
    assert periods.parse_date_string(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        None,
        "",
        "2024-3",
        "abcd",
        "24",
        "2024-13",
        "2024-02-30",
        "2024/03/15",
        "2024-03-1x",
        "\uff12\uff10\uff12\uff14",
        "2024-\u0660\u0663",
    ],
)
def test_parse_date_string_rejects_malformed_input(text) -> None:
    assert periods.parse_date_string(text).granularity == DateGranularity.NONE


def test_full_date_window_is_cumulative() -> None:
    w = TimeWindow(DateGranularity.FULL_DATE, 2024, 3, 15)

    assert w.contains(2023, 12, 31)
    assert w.contains(2024, 2, 29)
    assert w.contains(2024, 3, 15)
    assert not w.contains(2024, 3, 16)
    assert not w.contains(2024, 4, 1)


def test_month_and_year_windows_are_exact_periods() -> None:
    month = TimeWindow(DateGranularity.MONTH, 2024, 3)
    year = TimeWindow(DateGranularity.YEAR, 2024)

    assert month.contains(2024, 3, 1) and month.contains(2024, 3, 31)
    assert not month.contains(2024, 2, 28)
    assert not month.contains(2023, 3, 10)

    assert year.contains(2024, 1, 1) and year.contains(2024, 12, 31)
    assert not year.contains(2023, 12, 31)
    assert not year.contains(2025, 1, 1)


def test_window_labels() -> None:
    assert TimeWindow(DateGranularity.FULL_DATE, 2024, 3, 5).label == "2024-03-05"
    assert TimeWindow(DateGranularity.MONTH, 2024, 3).label == "2024-03"
    assert TimeWindow(DateGranularity.YEAR, 2024).label == "2024"


def test_sql_predicate_agrees_with_contains() -> None:
    """The SQL predicate selects the same rows as contains()."""
    records = [
        (2023, 12, 31),
        (2024, 2, 29),
        (2024, 3, 15),
        (2024, 3, 16),
        (2024, 4, 1),
        (2025, 1, 1),
    ]
    conn = sqlite3.connect(":memory:")
    try:
        conn.execute("CREATE TABLE r (year INTEGER, month INTEGER, day INTEGER);")
        conn.executemany("INSERT INTO r VALUES (?, ?, ?);", records)

        for window in (
            TimeWindow(DateGranularity.FULL_DATE, 2024, 3, 15),
            TimeWindow(DateGranularity.MONTH, 2024, 3),
            TimeWindow(DateGranularity.YEAR, 2024),
        ):
            expected = [r for r in records if window.contains(*r)]

            clause, params = window.sql("year", "month", "day")
            rows = conn.execute(
                f"SELECT year, month, day FROM r WHERE {clause} "
                "ORDER BY year, month, day;",
                params,
            ).fetchall()
            assert rows == expected
    finally:
        conn.close()


def test_resolve_full_date_window_defaults_to_today(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 6, 30))

    w = periods.resolve_full_date_window(None)
    assert w == TimeWindow(DateGranularity.FULL_DATE, 2024, 6, 30)


@pytest.mark.parametrize("text", ["2024", "2024-06", "yesterday"])
def test_resolve_full_date_window_rejects_partial_dates(text) -> None:
    with pytest.raises(InvalidDate, match="YYYY-MM-DD"):
        periods.resolve_full_date_window(text)


def test_resolve_any_window_accepts_every_granularity(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 6, 30))

    assert periods.resolve_any_window("2024").granularity == DateGranularity.YEAR
    assert periods.resolve_any_window("2024-02").granularity == DateGranularity.MONTH
    assert (
        periods.resolve_any_window(None).granularity == DateGranularity.FULL_DATE
    )

    with pytest.raises(InvalidDate):
        periods.resolve_any_window("abcd")


def test_resolve_period_window_defaults_to_current_month(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 6, 30))

    w = periods.resolve_period_window(None)
    assert w == TimeWindow(DateGranularity.MONTH, 2024, 6)


def test_resolve_period_window_rejects_full_date() -> None:
    with pytest.raises(InvalidDate, match="YYYY or YYYY-MM"):
        periods.resolve_period_window("2024-06-30")

