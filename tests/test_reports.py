from datetime import date

import pytest

import mm_ledger.periods as periods
from mm_ledger import reports
from mm_ledger.db import (
    close_account,
    insert_account,
    insert_category,
    insert_main_category,
    insert_transaction,
    open_snapshot,
    set_exchange_rate,
)
from mm_ledger.engine import GrandTotal, GroupClosed, GroupStarted, LeafLine
from mm_ledger.errors import (
    AmbiguousOrNotFound,
    InvalidDate,
    MissingExchangeRate,
    MissingRequiredParameter,
)
from mm_ledger.model import AccountType, MainCategoryType


def _leaves(report):
    return [(e.key, e.leaf, e.values) for e in report.events if isinstance(e, LeafLine)]


def _subtotals(report):
    return {e.key: e.subtotal for e in report.events if isinstance(e, GroupClosed)}


def _total(report):
    last = report.events[-1]
    assert isinstance(last, GrandTotal)
    return last.total


# ---------------------------------------------------------------------------
# Accounts balance & assets summary
# ---------------------------------------------------------------------------


def test_accounts_balance_end_to_end(ledger_cfg):
    """One cost of 50 on a USD checking account shows as -50.00 USD."""
    cfg = ledger_cfg
    checking = insert_account(cfg, "Checking", AccountType.TRANSACTIONAL, "USD")
    food = insert_main_category(cfg, "Food", MainCategoryType.COST)
    groceries = insert_category(cfg, "Groceries", food.id)
    insert_transaction(cfg, "2024-01-10", checking.id, groceries.id, "Market", 50)

    with open_snapshot(cfg) as snapshot:
        balance = reports.accounts_balance(snapshot, "2024-01-31")
        net = reports.net_value(snapshot, "USD", "2024-12-31")

    assert balance.lines == (
        reports.AccountBalanceLine(AccountType.TRANSACTIONAL, "Checking", -50.0, "USD"),
    )
    assert balance.lines[0].account_type.label == "Operations"
    assert net.lines == (reports.NetValueLine(2024, 1, -50.0),)


def test_accounts_balance_is_cumulative_in_native_currencies(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        january = reports.accounts_balance(snapshot, "2024-01-31")
        february = reports.accounts_balance(snapshot, "2024-02-29")

    assert [(l.name, l.value, l.currency) for l in january.lines] == [
        ("Checking", 720.0, "USD"),
        ("Savings", 200.0, "USD"),
    ]
    # Livret has no rate requirement here: values stay in EUR.
    assert [(l.account_type, l.name, l.value, l.currency) for l in february.lines] == [
        (AccountType.TRANSACTIONAL, "Checking", 640.0, "USD"),
        (AccountType.SAVING, "Livret", 100.0, "EUR"),
        (AccountType.SAVING, "Savings", 200.0, "USD"),
    ]


def test_accounts_balance_skips_closed_accounts(sample_ledger):
    close_account(sample_ledger.cfg, sample_ledger.savings.id)

    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.accounts_balance(snapshot, "2024-02-29")

    assert [l.name for l in report.lines] == ["Checking", "Livret"]


def test_accounts_balance_requires_full_date(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        with pytest.raises(InvalidDate):
            reports.accounts_balance(snapshot, "2024-01")


def test_assets_summary_converts_and_subtotals(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.assets_summary(snapshot, "usd", "2024-02-29")

    assert report.currency == "USD"
    assert [e.key for e in report.events if isinstance(e, GroupStarted)] == [
        AccountType.TRANSACTIONAL,
        AccountType.SAVING,
    ]
    leaves = {leaf: values[0] for _, leaf, values in _leaves(report)}
    assert leaves["Checking"] == pytest.approx(640.0)
    assert leaves["Livret"] == pytest.approx(110.0)
    assert leaves["Savings"] == pytest.approx(200.0)

    subtotals = _subtotals(report)
    assert subtotals[AccountType.TRANSACTIONAL][0] == pytest.approx(640.0)
    assert subtotals[AccountType.SAVING][0] == pytest.approx(310.0)
    assert _total(report)[0] == pytest.approx(950.0)


def test_assets_summary_reports_missing_rate(sample_ledger):
    """Only EUR -> USD exists, so a EUR report lacks USD -> EUR."""
    with open_snapshot(sample_ledger.cfg) as snapshot:
        with pytest.raises(MissingExchangeRate) as excinfo:
            reports.assets_summary(snapshot, "EUR", "2024-02-29")

    assert excinfo.value.pairs == ["USD-EUR"]


def test_assets_summary_does_not_triangulate(sample_ledger):
    cfg = sample_ledger.cfg
    pound = insert_account(cfg, "Pound", AccountType.TRANSACTIONAL, "GBP")
    insert_transaction(cfg, "2024-01-02", pound.id, sample_ledger.paycheck.id, "", 10)
    # GBP -> EUR -> USD exists, GBP -> USD does not.
    set_exchange_rate(cfg, "GBP", "EUR", 1.15)

    with open_snapshot(cfg) as snapshot:
        with pytest.raises(MissingExchangeRate) as excinfo:
            reports.assets_summary(snapshot, "USD", "2024-02-29")

    assert excinfo.value.pairs == ["GBP-USD"]


def test_missing_currency_is_listed_once(sample_ledger):
    cfg = sample_ledger.cfg
    yen = insert_account(cfg, "Yen", AccountType.TRANSACTIONAL, "JPY")
    for day in range(1, 6):
        insert_transaction(
            cfg, f"2024-01-0{day}", yen.id, sample_ledger.groceries.id, "", 1000
        )

    with open_snapshot(cfg) as snapshot:
        with pytest.raises(MissingExchangeRate) as excinfo:
            reports.categories_balance(snapshot, "USD", "2024")

    assert excinfo.value.currencies == ["JPY"]
    assert str(excinfo.value).count("JPY-USD") == 1


def test_reporting_currency_falls_back_to_default(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.assets_summary(
            snapshot, None, "2024-01-31", default_currency="USD"
        )
        with pytest.raises(MissingRequiredParameter):
            reports.assets_summary(snapshot, None, "2024-01-31")

    assert report.currency == "USD"


# ---------------------------------------------------------------------------
# Transactions balance
# ---------------------------------------------------------------------------


def test_transactions_balance_month_window(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.transactions_balance(snapshot, "USD", "2024-01")

    assert [(l.date, l.category, l.value) for l in report.lines] == [
        (date(2024, 1, 5), "Paycheck", 1000.0),
        (date(2024, 1, 10), "Groceries", -50.0),
        (date(2024, 1, 20), "Restaurant", -30.0),
        (date(2024, 1, 25), "Move", -200.0),
        (date(2024, 1, 25), "Move", 200.0),
    ]
    assert report.total == pytest.approx(920.0)


def test_transactions_balance_filters(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        groceries = reports.transactions_balance(
            snapshot, "USD", "2024", category="Groc"
        )
        savings = reports.transactions_balance(snapshot, "USD", "2024", account="Sav")
        costs = reports.transactions_balance(
            snapshot, "USD", "2024", main_category_type=MainCategoryType.COST
        )
        food = reports.transactions_balance(
            snapshot, "USD", "2024", main_category="Food"
        )
        eur_accounts = reports.transactions_balance(
            snapshot, "USD", "2024", account_currency="eur"
        )

    assert [l.value for l in groceries.lines] == [-50.0, -80.0]
    assert groceries.total == pytest.approx(-130.0)
    assert [l.account for l in savings.lines] == ["Savings"]
    assert [l.value for l in costs.lines] == [-50.0, -30.0, -80.0]
    assert [l.value for l in food.lines] == [-50.0, -30.0, -80.0]
    assert [l.value for l in eur_accounts.lines] == [pytest.approx(110.0)]


def test_transactions_balance_name_filters_must_be_unique(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        with pytest.raises(AmbiguousOrNotFound, match="ambiguous"):
            reports.transactions_balance(snapshot, "USD", "2024", category="e")
        with pytest.raises(AmbiguousOrNotFound, match="not found"):
            reports.transactions_balance(snapshot, "USD", "2024", account="Nope")


# ---------------------------------------------------------------------------
# Categories & main categories balance
# ---------------------------------------------------------------------------


def test_categories_balance_groups_by_type_descending(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.categories_balance(snapshot, "USD", "2024")

    assert [e.key for e in report.events if isinstance(e, GroupStarted)] == [
        MainCategoryType.INCOME,
        MainCategoryType.TRANSFER,
        MainCategoryType.COST,
    ]
    assert [(leaf, pytest.approx(v[0])) for _, leaf, v in _leaves(report)] == [
        (("Salary", "Paycheck"), 1110.0),
        (("Internal", "Move"), 0.0),
        (("Food", "Groceries"), -130.0),
        (("Food", "Restaurant"), -30.0),
    ]
    subtotals = _subtotals(report)
    assert subtotals[MainCategoryType.COST][0] == pytest.approx(-160.0)
    assert _total(report)[0] == pytest.approx(950.0)


def test_categories_balance_cumulative_date(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.categories_balance(snapshot, "USD", "2024-01-15")

    assert [leaf for _, leaf, _ in _leaves(report)] == [
        ("Salary", "Paycheck"),
        ("Food", "Groceries"),
    ]
    assert _total(report)[0] == pytest.approx(950.0)


def test_main_categories_balance(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.main_categories_balance(snapshot, "USD", "2024")

    assert not report.by_category
    assert [(key, leaf) for key, leaf, _ in _leaves(report)] == [
        (MainCategoryType.INCOME, "Salary"),
        (MainCategoryType.TRANSFER, "Internal"),
        (MainCategoryType.COST, "Food"),
    ]
    assert _subtotals(report)[MainCategoryType.COST][0] == pytest.approx(-160.0)


# ---------------------------------------------------------------------------
# Budget reports
# ---------------------------------------------------------------------------


def test_budget_difference_is_actual_minus_budget(sample_ledger):
    """A cost budget of 100 with 80 spent is 20 under budget."""
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.budget_categories(snapshot, "USD", "2024-02")

    leaves = {leaf: values for _, leaf, values in _leaves(report)}
    assert leaves[("Food", "Groceries")] == (-100.0, -80.0, 20.0)
    assert _subtotals(report)[MainCategoryType.COST] == (-100.0, -80.0, 20.0)


def test_budget_categories_month(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.budget_categories(snapshot, "USD", "2024-01")

    assert _leaves(report) == [
        (MainCategoryType.INCOME, ("Salary", "Paycheck"), (900.0, 1000.0, 100.0)),
        (MainCategoryType.COST, ("Food", "Groceries"), (-100.0, -50.0, 50.0)),
        (MainCategoryType.COST, ("Food", "Restaurant"), (0.0, -30.0, -30.0)),
    ]
    assert _subtotals(report) == {
        MainCategoryType.INCOME: (900.0, 1000.0, 100.0),
        MainCategoryType.COST: (-100.0, -80.0, 20.0),
    }
    assert _total(report) == (800.0, 920.0, 120.0)


def test_budget_reports_never_show_transfers(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        by_category = reports.budget_categories(snapshot, "USD", "2024")
        by_main = reports.budget_main_categories(snapshot, "USD", "2024")

    for report in (by_category, by_main):
        keys = {e.key for e in report.events if isinstance(e, GroupStarted)}
        assert keys == {MainCategoryType.INCOME, MainCategoryType.COST}


def test_budget_main_categories_year(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.budget_main_categories(snapshot, "USD", "2024")

    leaves = {leaf: values for _, leaf, values in _leaves(report)}
    assert leaves["Salary"] == pytest.approx((900.0, 1110.0, 210.0))
    assert leaves["Food"] == (-200.0, -160.0, 40.0)


def test_budget_period_defaults_to_current_month(sample_ledger, monkeypatch):
    monkeypatch.setattr(periods, "_today", lambda: date(2024, 1, 15))

    with open_snapshot(sample_ledger.cfg) as snapshot:
        default = reports.budget_categories(snapshot, "USD")
        explicit = reports.budget_categories(snapshot, "USD", "2024-01")

    assert default == explicit


def test_budget_rejects_full_date(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        with pytest.raises(InvalidDate):
            reports.budget_categories(snapshot, "USD", "2024-01-31")


def test_empty_budget_period(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.budget_categories(snapshot, "USD", "2023-05")

    assert report.events == (GrandTotal((0.0, 0.0, 0.0)),)


# ---------------------------------------------------------------------------
# Net value
# ---------------------------------------------------------------------------


def test_net_value_is_a_running_sum(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.net_value(snapshot, "USD", "2024-02-29")
        january_only = reports.net_value(snapshot, "USD", "2024-01-31")

    assert [(l.year, l.month) for l in report.lines] == [(2024, 1), (2024, 2)]
    assert report.lines[0].value == pytest.approx(920.0)
    assert report.lines[1].value == pytest.approx(950.0)
    assert len(january_only.lines) == 1


def test_net_value_includes_closed_accounts(sample_ledger):
    close_account(sample_ledger.cfg, sample_ledger.savings.id)

    with open_snapshot(sample_ledger.cfg) as snapshot:
        report = reports.net_value(snapshot, "USD", "2024-01-31")

    assert report.lines[0].value == pytest.approx(920.0)


def test_reports_are_idempotent(sample_ledger):
    with open_snapshot(sample_ledger.cfg) as snapshot:
        first = reports.categories_balance(snapshot, "USD", "2024")
    with open_snapshot(sample_ledger.cfg) as snapshot:
        second = reports.categories_balance(snapshot, "USD", "2024")

    assert first == second
