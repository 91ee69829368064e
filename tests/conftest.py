from types import SimpleNamespace

import pytest

from mm_ledger.db import (
    DatabaseConfig,
    init_database,
    insert_account,
    insert_budget,
    insert_category,
    insert_main_category,
    insert_transaction,
    set_exchange_rate,
)
from mm_ledger.model import AccountType, MainCategoryType


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    return DatabaseConfig(engine="sqlite", path=tmp_path / "ledger.sqlite")


@pytest.fixture
def ledger_cfg(tmp_path) -> DatabaseConfig:
    """An initialized, empty ledger file."""
    cfg = make_tmp_db_cfg(tmp_path)
    init_database(cfg)
    return cfg


@pytest.fixture
def sample_ledger(ledger_cfg) -> SimpleNamespace:
    """
    Small multi-currency ledger shared by the report tests.

    Accounts: Checking (operations, USD), Savings (saving, USD),
    Livret (saving, EUR). One rate: 1 EUR = 1.1 USD.

    January 2024 (USD, Checking unless noted):
      +1000 Paycheck, -50 Groceries, -30 Restaurant,
      -200 Move, +200 Move (Savings)
    February 2024:
      +100 EUR Paycheck (Livret), -80 Groceries

    Budgets: Groceries 100 USD in January and February, Paycheck 900 USD
    in January, Move 50 USD in January.
    """
    cfg = ledger_cfg

    checking = insert_account(cfg, "Checking", AccountType.TRANSACTIONAL, "USD")
    savings = insert_account(cfg, "Savings", AccountType.SAVING, "USD")
    livret = insert_account(cfg, "Livret", AccountType.SAVING, "EUR")

    food = insert_main_category(cfg, "Food", MainCategoryType.COST)
    salary = insert_main_category(cfg, "Salary", MainCategoryType.INCOME)
    internal = insert_main_category(cfg, "Internal", MainCategoryType.TRANSFER)

    groceries = insert_category(cfg, "Groceries", food.id)
    restaurant = insert_category(cfg, "Restaurant", food.id)
    paycheck = insert_category(cfg, "Paycheck", salary.id)
    move = insert_category(cfg, "Move", internal.id)

    set_exchange_rate(cfg, "EUR", "USD", 1.1)

    insert_transaction(cfg, "2024-01-05", checking.id, paycheck.id, "January pay", 1000)
    insert_transaction(cfg, "2024-01-10", checking.id, groceries.id, "Market", 50)
    insert_transaction(cfg, "2024-01-20", checking.id, restaurant.id, "Dinner", 30)
    insert_transaction(cfg, "2024-01-25", checking.id, move.id, "To savings", -200)
    insert_transaction(cfg, "2024-01-25", savings.id, move.id, "From checking", 200)
    insert_transaction(cfg, "2024-02-03", livret.id, paycheck.id, "Bonus", 100)
    insert_transaction(cfg, "2024-02-15", checking.id, groceries.id, "Market", 80)

    insert_budget(cfg, 2024, 1, groceries.id, 100, "USD")
    insert_budget(cfg, 2024, 2, groceries.id, 100, "USD")
    insert_budget(cfg, 2024, 1, paycheck.id, 900, "USD")
    insert_budget(cfg, 2024, 1, move.id, 50, "USD")

    return SimpleNamespace(
        cfg=cfg,
        checking=checking,
        savings=savings,
        livret=livret,
        food=food,
        salary=salary,
        internal=internal,
        groceries=groceries,
        restaurant=restaurant,
        paycheck=paycheck,
        move=move,
    )
