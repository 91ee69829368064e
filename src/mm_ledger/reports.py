# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report algorithms for MM Ledger.

Every report follows the same pipeline:

1. resolve the reporting currency (explicit value, else the configured
   default, else ``MissingRequiredParameter``),
2. resolve the time window accepted by the report,
3. resolve name filters to exactly one open entity,
4. fetch the records through a ``LedgerSnapshot``,
5. check that every currency in those records has a direct rate to the
   reporting currency and convert them (``currency.py``),
6. sum per leaf with pandas, sort, and feed the rows to the grouping
   engine (``engine.py``).

Reports return frozen dataclasses. Nothing is printed here: ``views.py``
renders a report only once it has been fully computed, so a failing report
never produces partial output.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

import pandas as pd

from .currency import apply_conversion, resolve_conversion_factors
from .db import AccountFilter, BudgetFilter, LedgerSnapshot, TransactionFilter
from .engine import Event, aggregate
from .errors import MissingRequiredParameter
from .model import AccountType, MainCategoryType
from .periods import (
    TimeWindow,
    resolve_any_window,
    resolve_full_date_window,
    resolve_period_window,
)

logger = logging.getLogger(__name__)

_BUDGET_TYPES = (int(MainCategoryType.COST), int(MainCategoryType.INCOME))


# ---------------------------------------------------------------------------
# Report objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountBalanceLine:
    account_type: AccountType
    name: str
    value: float
    currency: str


@dataclass(frozen=True)
class AccountsBalanceReport:
    """Cumulative balance of each open account, in its own currency."""

    window: TimeWindow
    lines: tuple[AccountBalanceLine, ...]


@dataclass(frozen=True)
class AssetsSummaryReport:
    """
    Converted account balances grouped by account type.

    Attributes
    ----------
    events:
        Engine events keyed by ``AccountType`` with the account name as
        leaf and a single value column.
    """

    window: TimeWindow
    currency: str
    events: tuple[Event, ...]


@dataclass(frozen=True)
class TransactionLine:
    date: dt.date
    main_category: str
    category: str
    account: str
    value: float
    description: str


@dataclass(frozen=True)
class TransactionsBalanceReport:
    window: TimeWindow
    currency: str
    lines: tuple[TransactionLine, ...]
    total: float


@dataclass(frozen=True)
class CategoriesBalanceReport:
    """
    Converted sums grouped by main category type.

    Leaves are ``(main category, category)`` name pairs when
    ``by_category`` is True, main category names otherwise.
    """

    window: TimeWindow
    currency: str
    by_category: bool
    events: tuple[Event, ...]


@dataclass(frozen=True)
class BudgetReport:
    """
    Budget against actual values for one month or one year.

    Attributes
    ----------
    events:
        Engine events keyed by ``MainCategoryType`` (Income then Cost) with
        three value columns: budget, actual, actual - budget.
    """

    window: TimeWindow
    currency: str
    by_category: bool
    events: tuple[Event, ...]


@dataclass(frozen=True)
class NetValueLine:
    year: int
    month: int
    value: float


@dataclass(frozen=True)
class NetValueReport:
    window: TimeWindow
    currency: str
    lines: tuple[NetValueLine, ...]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_currency(currency: str | None, default_currency: str | None) -> str:
    chosen = currency or default_currency
    if not chosen:
        raise MissingRequiredParameter(
            "reporting currency",
            "Give one explicitly or set [reporting] default_currency.",
        )
    return chosen.strip().upper()


def _convert_frames(
    snapshot: LedgerSnapshot, reporting_currency: str, *frames: pd.DataFrame
) -> list[pd.DataFrame]:
    """
    Convert the ``value`` column of every frame into the reporting currency.

    The coverage check runs once over the union of currencies of all
    frames, so a single error lists every missing pair.
    """
    used: set[str] = set()
    for df in frames:
        used.update(df["currency"].unique())
    rates = snapshot.list_exchange_rates(reporting_currency)
    factors = resolve_conversion_factors(reporting_currency, used, rates)
    return [apply_conversion(df, factors) for df in frames]


def _sum_by(df: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    """Sum ``value`` per ``keys``; always returns ``keys + ['value']`` columns."""
    if df.empty:
        return pd.DataFrame(columns=keys + ["value"])
    out = df.groupby(keys, sort=True)["value"].sum().reset_index()
    out["value"] = out["value"].astype(float)
    return out


def _open_account_transactions(
    snapshot: LedgerSnapshot, window: TimeWindow
) -> pd.DataFrame:
    open_ids = snapshot.list_accounts(AccountFilter())["id"]
    tx = snapshot.list_transactions(TransactionFilter(window=window))
    return tx.loc[tx["account_id"].isin(open_ids)]


# ---------------------------------------------------------------------------
# Account reports
# ---------------------------------------------------------------------------


def accounts_balance(
    snapshot: LedgerSnapshot, date: str | None = None
) -> AccountsBalanceReport:
    """
    Balance of every open account on a date, in native currencies.

    Only accounts with at least one transaction on or before the date are
    listed. No conversion happens, so no exchange rate is required and no
    subtotal is computed.
    """
    window = resolve_full_date_window(date)
    tx = _open_account_transactions(snapshot, window)

    sums = _sum_by(tx, ["account_type", "account", "account_id", "currency"])
    lines = tuple(
        AccountBalanceLine(
            account_type=AccountType(int(row.account_type)),
            name=row.account,
            value=float(row.value),
            currency=row.currency,
        )
        for row in sums.itertuples(index=False)
    )
    return AccountsBalanceReport(window=window, lines=lines)


def assets_summary(
    snapshot: LedgerSnapshot,
    currency: str | None = None,
    date: str | None = None,
    *,
    default_currency: str | None = None,
) -> AssetsSummaryReport:
    """Converted balance of open accounts with a subtotal per account type."""
    reporting = _resolve_currency(currency, default_currency)
    window = resolve_full_date_window(date)

    (tx,) = _convert_frames(
        snapshot, reporting, _open_account_transactions(snapshot, window)
    )
    sums = _sum_by(tx, ["account_type", "account", "account_id"])

    events = aggregate(
        (AccountType(int(row.account_type)), row.account, row.value)
        for row in sums.itertuples(index=False)
    )
    return AssetsSummaryReport(window=window, currency=reporting, events=tuple(events))


# ---------------------------------------------------------------------------
# Transaction reports
# ---------------------------------------------------------------------------


def transactions_balance(
    snapshot: LedgerSnapshot,
    currency: str | None = None,
    date: str | None = None,
    *,
    account: str | None = None,
    category: str | None = None,
    main_category: str | None = None,
    main_category_type: MainCategoryType | None = None,
    account_currency: str | None = None,
    default_currency: str | None = None,
) -> TransactionsBalanceReport:
    """
    Flat, converted list of transactions matching the filters.

    Name filters must each resolve to exactly one open entity.
    ``account_currency`` keeps only accounts held in that currency.
    """
    reporting = _resolve_currency(currency, default_currency)
    window = resolve_any_window(date)

    filters = TransactionFilter(
        window=window,
        account_id=snapshot.resolve_account_id(account) if account else None,
        category_id=snapshot.resolve_category_id(category) if category else None,
        main_category_id=(
            snapshot.resolve_main_category_id(main_category)
            if main_category
            else None
        ),
        main_category_type=main_category_type,
        currency=account_currency.strip().upper() if account_currency else None,
    )
    (tx,) = _convert_frames(snapshot, reporting, snapshot.list_transactions(filters))

    lines = tuple(
        TransactionLine(
            date=dt.date(int(row.year), int(row.month), int(row.day)),
            main_category=row.main_category,
            category=row.category,
            account=row.account,
            value=float(row.value),
            description=row.description or "",
        )
        for row in tx.itertuples(index=False)
    )
    total = float(sum(line.value for line in lines))
    logger.debug("Transactions balance: %d line(s), total %.2f", len(lines), total)
    return TransactionsBalanceReport(
        window=window, currency=reporting, lines=lines, total=total
    )


def _category_sums(
    snapshot: LedgerSnapshot,
    currency: str | None,
    date: str | None,
    keys: list[str],
    default_currency: str | None,
) -> tuple[TimeWindow, str, pd.DataFrame]:
    reporting = _resolve_currency(currency, default_currency)
    window = resolve_any_window(date)

    (tx,) = _convert_frames(
        snapshot, reporting, snapshot.list_transactions(TransactionFilter(window=window))
    )
    sums = _sum_by(tx, keys)
    sums = sums.sort_values(
        keys, ascending=[False] + [True] * (len(keys) - 1), kind="mergesort"
    )
    return window, reporting, sums


def categories_balance(
    snapshot: LedgerSnapshot,
    currency: str | None = None,
    date: str | None = None,
    *,
    default_currency: str | None = None,
) -> CategoriesBalanceReport:
    """Converted sums per (main category, category), grouped by type."""
    window, reporting, sums = _category_sums(
        snapshot,
        currency,
        date,
        ["main_category_type", "main_category", "category"],
        default_currency,
    )
    events = aggregate(
        (
            MainCategoryType(int(row.main_category_type)),
            (row.main_category, row.category),
            row.value,
        )
        for row in sums.itertuples(index=False)
    )
    return CategoriesBalanceReport(
        window=window, currency=reporting, by_category=True, events=tuple(events)
    )


def main_categories_balance(
    snapshot: LedgerSnapshot,
    currency: str | None = None,
    date: str | None = None,
    *,
    default_currency: str | None = None,
) -> CategoriesBalanceReport:
    """Converted sums per main category, grouped by type."""
    window, reporting, sums = _category_sums(
        snapshot,
        currency,
        date,
        ["main_category_type", "main_category"],
        default_currency,
    )
    events = aggregate(
        (MainCategoryType(int(row.main_category_type)), row.main_category, row.value)
        for row in sums.itertuples(index=False)
    )
    return CategoriesBalanceReport(
        window=window, currency=reporting, by_category=False, events=tuple(events)
    )


# ---------------------------------------------------------------------------
# Budget reports
# ---------------------------------------------------------------------------


def _budget_rows(
    snapshot: LedgerSnapshot,
    currency: str | None,
    period: str | None,
    keys: list[str],
    default_currency: str | None,
) -> tuple[TimeWindow, str, pd.DataFrame]:
    """
    Return budget and actual sums per ``keys`` for Cost and Income types.

    A leaf appears as soon as it has a budget or a transaction in the
    period; the missing side is 0.
    """
    reporting = _resolve_currency(currency, default_currency)
    window = resolve_period_window(period)

    budgets = snapshot.list_budgets(BudgetFilter(window=window))
    budgets = budgets.loc[budgets["main_category_type"].isin(_BUDGET_TYPES)]
    tx = snapshot.list_transactions(TransactionFilter(window=window))
    tx = tx.loc[tx["main_category_type"].isin(_BUDGET_TYPES)]

    budgets, tx = _convert_frames(snapshot, reporting, budgets, tx)

    planned = _sum_by(budgets, keys).rename(columns={"value": "budget"})
    planned["actual"] = 0.0
    actual = _sum_by(tx, keys).rename(columns={"value": "actual"})
    actual["budget"] = 0.0

    parts = [part for part in (planned, actual) if not part.empty]
    if parts:
        merged = (
            pd.concat(parts, ignore_index=True)
            .groupby(keys, sort=True)[["budget", "actual"]]
            .sum()
            .reset_index()
        )
    else:
        merged = pd.DataFrame(columns=keys + ["budget", "actual"])
    merged["budget"] = merged["budget"].astype(float)
    merged["actual"] = merged["actual"].astype(float)
    merged["difference"] = merged["actual"] - merged["budget"]

    merged = merged.sort_values(
        keys, ascending=[False] + [True] * (len(keys) - 1), kind="mergesort"
    )
    return window, reporting, merged


def budget_categories(
    snapshot: LedgerSnapshot,
    currency: str | None = None,
    period: str | None = None,
    *,
    default_currency: str | None = None,
) -> BudgetReport:
    """Budget against actual per category for a month (default) or a year."""
    window, reporting, rows = _budget_rows(
        snapshot,
        currency,
        period,
        ["main_category_type", "main_category", "category", "category_id"],
        default_currency,
    )
    events = aggregate(
        (
            (
                MainCategoryType(int(row.main_category_type)),
                (row.main_category, row.category),
                (row.budget, row.actual, row.difference),
            )
            for row in rows.itertuples(index=False)
        ),
        width=3,
    )
    return BudgetReport(
        window=window, currency=reporting, by_category=True, events=tuple(events)
    )


def budget_main_categories(
    snapshot: LedgerSnapshot,
    currency: str | None = None,
    period: str | None = None,
    *,
    default_currency: str | None = None,
) -> BudgetReport:
    """Budget against actual per main category for a month or a year."""
    window, reporting, rows = _budget_rows(
        snapshot,
        currency,
        period,
        ["main_category_type", "main_category", "main_category_id"],
        default_currency,
    )
    events = aggregate(
        (
            (
                MainCategoryType(int(row.main_category_type)),
                row.main_category,
                (row.budget, row.actual, row.difference),
            )
            for row in rows.itertuples(index=False)
        ),
        width=3,
    )
    return BudgetReport(
        window=window, currency=reporting, by_category=False, events=tuple(events)
    )


# ---------------------------------------------------------------------------
# Net value
# ---------------------------------------------------------------------------


def net_value(
    snapshot: LedgerSnapshot,
    currency: str | None = None,
    date: str | None = None,
    *,
    default_currency: str | None = None,
) -> NetValueReport:
    """
    Running net value at the end of each month with activity.

    Every transaction of every account counts, closed accounts included.
    The value of a month is the cumulative sum of all converted values up
    to and including that month.
    """
    reporting = _resolve_currency(currency, default_currency)
    window = resolve_full_date_window(date)

    (tx,) = _convert_frames(
        snapshot, reporting, snapshot.list_transactions(TransactionFilter(window=window))
    )
    monthly = _sum_by(tx, ["year", "month"])
    monthly["value"] = monthly["value"].astype(float).cumsum()

    lines = tuple(
        NetValueLine(year=int(row.year), month=int(row.month), value=float(row.value))
        for row in monthly.itertuples(index=False)
    )
    return NetValueReport(window=window, currency=reporting, lines=lines)
