# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Text views for MM Ledger reports.

This module turns fully computed report objects (see ``reports.py``) into
fixed-width text lines. It never queries the ledger and never converts
values: everything shown has already been computed.

Column conventions shared by all reports:

- names (accounts, categories, main categories): 10 chars, truncated,
- account type labels: 10 chars, main category type labels: 8 chars,
- descriptions: 30 chars, currency codes: 3 chars,
- values: ``%10.2f``, exchange rates: ``%13.4f``,
- subtotal and total lines are emphasized with ``ESC[1m`` / ``ESC[0m``
  unless emphasis is disabled in the configuration.

Item listings (accounts, main categories, categories) are plain tables whose
columns are as wide as their longest cell; missing values show as ``-``.
"""

import pandas as pd

from .engine import GrandTotal, GroupClosed, GroupStarted, LeafLine
from .model import AccountType, ItemStatus, MainCategoryType
from .periods import DateGranularity, TimeWindow
from .reports import (
    AccountsBalanceReport,
    AssetsSummaryReport,
    BudgetReport,
    CategoriesBalanceReport,
    NetValueReport,
    TransactionsBalanceReport,
)

EMP_ON = "\x1b[1m"
EMP_OFF = "\x1b[0m"

GAP = "  "
GAPS = " "


def _name(text: str) -> str:
    return f"{text:<10.10}"


def _name_t(text: str) -> str:
    return f"{text:<10}"


def _atype(text: str) -> str:
    return f"{text:<10.10}"


def _mtype(text: str) -> str:
    return f"{text:<8.8}"


def _desc(text: str) -> str:
    return f"{text:<30.30}"


def _cur(text: str) -> str:
    return f"{text:<3.3}"


def _value(value: float) -> str:
    return f"{value:10.2f}"


def _value_t(text: str) -> str:
    return f"{text:>10}"


def _emphasize(line: str, emphasis: bool) -> str:
    if not emphasis:
        return line
    return f"{EMP_ON}{line}{EMP_OFF}"


def _money(value: float, currency: str) -> str:
    """``GAP value GAPS currency`` cell used by every value column."""
    return f"{GAP}{_value(value)}{GAPS}{_cur(currency)}"


def _money_t(label: str) -> str:
    return f"{GAP}{_value_t(label)}{GAPS}{'CUR':<3}"


def _period_title(prefix: str, window: TimeWindow) -> str:
    """
    Title for reports accepting any granularity.

    Full dates read "up to", months and years read "during".
    """
    if window.granularity == DateGranularity.FULL_DATE:
        return f"{prefix} up to: {window.label}"
    if window.granularity == DateGranularity.MONTH:
        return f"{prefix} during month {window.label}"
    return f"{prefix} during year {window.label}"


# ---------------------------------------------------------------------------
# Account reports
# ---------------------------------------------------------------------------


def render_accounts_balance(report: AccountsBalanceReport) -> list[str]:
    lines = [f"Accounts balance on {report.window.label}"]
    current_type = None
    for line in report.lines:
        if line.account_type != current_type:
            current_type = line.account_type
            lines.append("")
            lines.append(_atype(current_type.label))
        lines.append(f"{GAP}{_name(line.name)}{_money(line.value, line.currency)}")
    return lines


def render_assets_summary(
    report: AssetsSummaryReport, *, emphasis: bool = True
) -> list[str]:
    cur = report.currency
    lines = [f"Assets summary on {report.window.label}:"]
    for event in report.events:
        if isinstance(event, GroupStarted):
            lines.append("")
            lines.append(_atype(event.key.label))
        elif isinstance(event, LeafLine):
            lines.append(f"{GAP}{_name(event.leaf)}{_money(event.values[0], cur)}")
        elif isinstance(event, GroupClosed):
            lines.append(
                _emphasize(
                    f"{_atype(event.key.label)}{GAP}{_money(event.subtotal[0], cur)}",
                    emphasis,
                )
            )
        elif isinstance(event, GrandTotal):
            lines.append("")
            lines.append(
                _emphasize(
                    f"{_name('Total:')}{GAP}{_money(event.total[0], cur)}", emphasis
                )
            )
    return lines


# ---------------------------------------------------------------------------
# Transaction reports
# ---------------------------------------------------------------------------


def render_transactions_balance(report: TransactionsBalanceReport) -> list[str]:
    cur = report.currency
    lines = [_period_title("Transactions", report.window), ""]
    lines.append(
        f"{'DATE':<10}"
        f"{GAP}{_name_t('MAIN CAT.')}"
        f"{GAP}{_name_t('CATEGORY')}"
        f"{GAP}{_name_t('ACCOUNT')}"
        f"{_money_t('VALUE')}"
        f"{GAP}{'DESCRIPTION':<30}"
    )
    for line in report.lines:
        lines.append(
            f"{line.date.isoformat()}"
            f"{GAP}{_name(line.main_category)}"
            f"{GAP}{_name(line.category)}"
            f"{GAP}{_name(line.account)}"
            f"{_money(line.value, cur)}"
            f"{GAP}{_desc(line.description)}"
        )
    lines.append("")
    lines.append(f"Total: {_value(report.total)}{GAPS}{_cur(cur)}")
    return lines


def render_categories_balance(
    report: CategoriesBalanceReport, *, emphasis: bool = True
) -> list[str]:
    """Render a categories or a main categories balance."""
    cur = report.currency
    if report.by_category:
        title = _period_title("Category summary", report.window)
        header = f"{GAP}{_name_t('MAIN CAT.')}{GAP}{_name_t('CATEGORY')}{_money_t('VALUE')}"
        # Subtotal label spans the width of the name columns.
        pad = f"    {GAP}{_name('')}"
    else:
        title = _period_title("Main category summary", report.window)
        header = f"{GAP}{_name_t('MAIN CAT.')}{_money_t('VALUE')}"
        pad = "    "

    lines = [title]
    for event in report.events:
        if isinstance(event, GroupStarted):
            lines.append("")
            lines.append(_mtype(event.key.label))
            lines.append(header)
        elif isinstance(event, LeafLine):
            if report.by_category:
                main_category, category = event.leaf
                names = f"{GAP}{_name(main_category)}{GAP}{_name(category)}"
            else:
                names = f"{GAP}{_name(event.leaf)}"
            lines.append(f"{names}{_money(event.values[0], cur)}")
        elif isinstance(event, GroupClosed):
            lines.append(
                _emphasize(
                    f"{_mtype(event.key.label)}{pad}{_money(event.subtotal[0], cur)}",
                    emphasis,
                )
            )
        elif isinstance(event, GrandTotal):
            lines.append("")
            lines.append(
                _emphasize(
                    f"{_mtype('Total')}{pad}{_money(event.total[0], cur)}", emphasis
                )
            )
    return lines


# ---------------------------------------------------------------------------
# Budget reports
# ---------------------------------------------------------------------------


def _budget_title(window: TimeWindow) -> str:
    return f"Budget report for {window.label}:"


def render_budget(report: BudgetReport, *, emphasis: bool = True) -> list[str]:
    """Render a budget report by category or by main category."""
    cur = report.currency
    value_headers = (
        f"{_money_t('LIMIT')}{_money_t('ACTUAL')}{_money_t('DIFFERENCE')}"
    )
    if report.by_category:
        header = f"{GAP}{_name_t('MAIN CAT.')}{GAP}{_name_t('CATEGORY')}{value_headers}"
        pad = f"    {GAP}{_name('')}"
    else:
        header = f"{GAP}{_name_t('MAIN CAT.')}{value_headers}"
        pad = "    "

    def _cells(values: tuple[float, ...]) -> str:
        return "".join(_money(v, cur) for v in values)

    lines = [_budget_title(report.window)]
    for event in report.events:
        if isinstance(event, GroupStarted):
            lines.append("")
            lines.append(_mtype(event.key.label))
            lines.append(header)
        elif isinstance(event, LeafLine):
            if report.by_category:
                main_category, category = event.leaf
                names = f"{GAP}{_name(main_category)}{GAP}{_name(category)}"
            else:
                names = f"{GAP}{_name(event.leaf)}"
            lines.append(f"{names}{_cells(event.values)}")
        elif isinstance(event, GroupClosed):
            lines.append(
                _emphasize(
                    f"{_mtype(event.key.label)}{pad}{_cells(event.subtotal)}",
                    emphasis,
                )
            )
        elif isinstance(event, GrandTotal):
            lines.append("")
            lines.append(
                _emphasize(f"{_mtype('Total')}{pad}{_cells(event.total)}", emphasis)
            )
    return lines


# ---------------------------------------------------------------------------
# Net value & exchange rates
# ---------------------------------------------------------------------------


def render_net_value(report: NetValueReport) -> list[str]:
    cur = report.currency
    lines = [
        f"Net value up to: {report.window.label}",
        "",
        f"{'PERIOD':<7}{_money_t('NET VALUE')}",
    ]
    for line in report.lines:
        lines.append(f"{line.year:4d}-{line.month:02d}{_money(line.value, cur)}")
    return lines


def render_exchange_rates(rates: pd.DataFrame) -> list[str]:
    """Render stored exchange rates (columns currency_from, currency_to, rate)."""
    lines = [f"{'FROM':<4}{GAP}{'TO':<3}{GAP}{'RATE':>13}"]
    for row in rates.itertuples(index=False):
        lines.append(
            f"{_cur(row.currency_from):<4}{GAP}{_cur(row.currency_to)}"
            f"{GAP}{row.rate:13.4f}"
        )
    return lines


def _cell(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return "-"
    return str(value)


def _table(headers: list[str], rows: list[list[str]]) -> list[str]:
    """Align ``rows`` under ``headers``; the first column (ids) is right-aligned."""
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def _line(cells: list[str]) -> str:
        parts = [cells[0].rjust(widths[0])]
        parts += [cell.ljust(width) for cell, width in zip(cells[1:], widths[1:])]
        return GAP.join(parts).rstrip()

    return [_line(headers)] + [_line(row) for row in rows]


def render_account_list(accounts: pd.DataFrame) -> list[str]:
    """Render the result of ``LedgerSnapshot.list_accounts``."""
    rows = [
        [
            str(row.id),
            row.name,
            AccountType(row.type).label,
            row.currency,
            _cell(row.institution),
            ItemStatus(row.status).label,
            _cell(row.description),
        ]
        for row in accounts.itertuples(index=False)
    ]
    return _table(
        ["ID", "ACCOUNT", "TYPE", "CUR", "BANK", "STATUS", "DESCRIPTION"], rows
    )


def render_main_category_list(main_categories: pd.DataFrame) -> list[str]:
    rows = [
        [
            str(row.id),
            MainCategoryType(row.type).label,
            row.name,
            ItemStatus(row.status).label,
        ]
        for row in main_categories.itertuples(index=False)
    ]
    return _table(["ID", "TYPE", "MAINCAT", "STATUS"], rows)


def render_category_list(categories: pd.DataFrame) -> list[str]:
    rows = [
        [
            str(row.id),
            MainCategoryType(row.main_category_type).label,
            row.main_category,
            row.name,
            ItemStatus(row.status).label,
        ]
        for row in categories.itertuples(index=False)
    ]
    return _table(["ID", "TYPE", "MAINCAT", "CATEGORY", "STATUS"], rows)


def render_report(report, *, emphasis: bool = True) -> list[str]:
    """Dispatch a report object to its renderer."""
    if isinstance(report, AccountsBalanceReport):
        return render_accounts_balance(report)
    if isinstance(report, AssetsSummaryReport):
        return render_assets_summary(report, emphasis=emphasis)
    if isinstance(report, TransactionsBalanceReport):
        return render_transactions_balance(report)
    if isinstance(report, CategoriesBalanceReport):
        return render_categories_balance(report, emphasis=emphasis)
    if isinstance(report, BudgetReport):
        return render_budget(report, emphasis=emphasis)
    if isinstance(report, NetValueReport):
        return render_net_value(report)
    raise TypeError(f"No view for report type {type(report).__name__}")
