# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Time-window helpers for MM Ledger.

Users give report dates as partial ISO strings. The length of the string
decides its granularity:

- ``YYYY-MM-DD`` (10 characters): a full date,
- ``YYYY-MM``    (7 characters):  a month,
- ``YYYY``       (4 characters):  a year,
- anything else, or content other than ASCII digits, is "no date".

A parsed date becomes a ``TimeWindow``, i.e. an inclusive selection over
records carrying a year, a month and a day:

- a full date selects everything *on or before* that date (cumulative,
  used by balance-style reports),
- a month or a year selects only that exact period (used by period and
  budget reports).

Each report picks the granularities it accepts through one of the
``resolve_*_window`` helpers below.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import Optional

from .errors import InvalidDate


class DateGranularity(IntEnum):
    NONE = 0
    YEAR = 1
    MONTH = 2
    FULL_DATE = 3


@dataclass(frozen=True)
class ParsedDate:
    """Result of ``parse_date_string``. Unused components are 0."""

    granularity: DateGranularity
    year: int = 0
    month: int = 0
    day: int = 0


_PATTERNS = {
    10: (re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})"), DateGranularity.FULL_DATE),
    7: (re.compile(r"([0-9]{4})-([0-9]{2})"), DateGranularity.MONTH),
    4: (re.compile(r"([0-9]{4})"), DateGranularity.YEAR),
}

_NO_DATE = ParsedDate(DateGranularity.NONE)


def parse_date_string(text: Optional[str]) -> ParsedDate:
    """
    Parse a partial ISO date using length-based disambiguation.

    Returns a ``ParsedDate`` whose granularity is NONE when the text has an
    unsupported length, contains non-digit parts, or does not describe a
    real month or calendar day (``"2024-13"``, ``"2024-02-30"``).
    """
    if not text:
        return _NO_DATE

    entry = _PATTERNS.get(len(text))
    if entry is None:
        return _NO_DATE

    pattern, granularity = entry
    match = pattern.fullmatch(text)
    if match is None:
        return _NO_DATE

    parts = [int(g) for g in match.groups()]
    year = parts[0]
    month = parts[1] if len(parts) > 1 else 0
    day = parts[2] if len(parts) > 2 else 0

    if granularity >= DateGranularity.MONTH and not 1 <= month <= 12:
        return _NO_DATE
    if granularity == DateGranularity.FULL_DATE:
        try:
            date(year, month, day)
        except ValueError:
            return _NO_DATE

    return ParsedDate(granularity=granularity, year=year, month=month, day=day)


@dataclass(frozen=True)
class TimeWindow:
    """
    Inclusive selection over (year, month, day) records.

    Attributes
    ----------
    granularity:
        FULL_DATE windows are cumulative ("on or before"); MONTH and YEAR
        windows are exact periods.
    """

    granularity: DateGranularity
    year: int
    month: int = 0
    day: int = 0

    @classmethod
    def from_parsed(cls, parsed: ParsedDate) -> "TimeWindow":
        if parsed.granularity == DateGranularity.NONE:
            raise ValueError("Cannot build a time window from an empty date.")
        return cls(
            granularity=parsed.granularity,
            year=parsed.year,
            month=parsed.month,
            day=parsed.day,
        )

    @property
    def label(self) -> str:
        """Return the window date as text (``2024-03-15``, ``2024-03`` or ``2024``)."""
        if self.granularity == DateGranularity.FULL_DATE:
            return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
        if self.granularity == DateGranularity.MONTH:
            return f"{self.year:04d}-{self.month:02d}"
        return f"{self.year:04d}"

    def contains(self, year: int, month: int, day: int) -> bool:
        """Return True if the record dated (year, month, day) is selected."""
        if self.granularity == DateGranularity.FULL_DATE:
            return (
                year < self.year
                or (year == self.year and month < self.month)
                or (year == self.year and month == self.month and day <= self.day)
            )
        if self.granularity == DateGranularity.MONTH:
            return year == self.year and month == self.month
        return year == self.year

    def sql(self, year_col: str, month_col: str, day_col: str) -> tuple[str, list]:
        """
        Return a parameterized SQL predicate equivalent to ``contains``.

        Column expressions are provided by the caller (the data layer); only
        values are bound as parameters.
        """
        if self.granularity == DateGranularity.FULL_DATE:
            clause = (
                f"({year_col} < ?"
                f" OR ({year_col} = ? AND {month_col} < ?)"
                f" OR ({year_col} = ? AND {month_col} = ? AND {day_col} <= ?))"
            )
            params = [
                self.year,
                self.year,
                self.month,
                self.year,
                self.month,
                self.day,
            ]
            return clause, params
        if self.granularity == DateGranularity.MONTH:
            return f"({year_col} = ? AND {month_col} = ?)", [self.year, self.month]
        return f"({year_col} = ?)", [self.year]


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def _today_window() -> TimeWindow:
    today = _today()
    return TimeWindow(
        granularity=DateGranularity.FULL_DATE,
        year=today.year,
        month=today.month,
        day=today.day,
    )


def resolve_full_date_window(text: Optional[str]) -> TimeWindow:
    """
    Window for reports that need a full date (balances, assets, net value).

    Defaults to today when no date is given.

    Raises:
        InvalidDate: if ``text`` is given but is not a full ``YYYY-MM-DD`` date.
    """
    if not text:
        return _today_window()
    parsed = parse_date_string(text)
    if parsed.granularity != DateGranularity.FULL_DATE:
        raise InvalidDate(text, "YYYY-MM-DD")
    return TimeWindow.from_parsed(parsed)


def resolve_any_window(text: Optional[str]) -> TimeWindow:
    """
    Window for reports accepting a full date, a month or a year.

    Defaults to today (cumulative) when no date is given.

    Raises:
        InvalidDate: if ``text`` is given but cannot be parsed.
    """
    if not text:
        return _today_window()
    parsed = parse_date_string(text)
    if parsed.granularity == DateGranularity.NONE:
        raise InvalidDate(text, "YYYY-MM-DD, YYYY-MM or YYYY")
    return TimeWindow.from_parsed(parsed)


def resolve_period_window(text: Optional[str]) -> TimeWindow:
    """
    Window for budget reports: an exact month or an exact year.

    Defaults to the current month when no date is given.

    Raises:
        InvalidDate: if ``text`` is a full date or cannot be parsed.
    """
    if not text:
        today = _today()
        return TimeWindow(
            granularity=DateGranularity.MONTH, year=today.year, month=today.month
        )
    parsed = parse_date_string(text)
    if parsed.granularity not in (DateGranularity.YEAR, DateGranularity.MONTH):
        raise InvalidDate(text, "YYYY or YYYY-MM")
    return TimeWindow.from_parsed(parsed)

