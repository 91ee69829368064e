# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for MM Ledger.

This module owns every interaction with the SQLite ledger file. It is
responsible for:

- Creating the schema of a new ledger file.
- Inserting single rows (accounts, main categories, categories,
  transactions, budgets, exchange rates), applying the sign convention of
  the main category type once, at insert time.
- Closing accounts, main categories and categories. Nothing is ever
  deleted; closed items drop out of listings and name lookups.
- Exposing the read-only query capabilities used by the report engine
  through ``LedgerSnapshot``.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) accounts
   - id           INTEGER PRIMARY KEY
   - name         TEXT    NOT NULL
   - description  TEXT
   - institution  TEXT
   - type         INTEGER NOT NULL  -- AccountType value (1..5)
   - currency     TEXT    NOT NULL  -- immutable once the account exists
   - status       INTEGER NOT NULL  -- 0 closed | 1 open

2) main_categories
   - id, name, type (-1 cost | 0 transfer | 1 income), status

3) categories
   - id, name, main_category_id, status

4) transactions
   - id           INTEGER PRIMARY KEY
   - date         TEXT    NOT NULL  -- ISO date 'YYYY-MM-DD'
   - account_id   INTEGER NOT NULL
   - category_id  INTEGER NOT NULL
   - description  TEXT
   - value        REAL    NOT NULL  -- sign-adjusted, account currency

5) budgets
   - (year, month, category_id) PRIMARY KEY
   - value        REAL    NOT NULL  -- sign-adjusted
   - currency     TEXT    NOT NULL

6) exchange_rates
   - (currency_from, currency_to) PRIMARY KEY
   - rate         REAL    NOT NULL  -- 1 currency_from = rate currency_to

------------------------------------------------------------------------------
Read access
------------------------------------------------------------------------------

Reports never use the write helpers. They open a ``LedgerSnapshot``: one
read-only connection (``mode=ro``) holding a single read transaction for
the whole report, so every query of a report sees the same data.

Filters are small frozen dataclasses compiled into parameterized WHERE
clauses by ``_Where``. Values are always bound as parameters.

Name filters are case-sensitive substring matches (``instr``), unlike
SQLite's ``LIKE`` which ignores ASCII case.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pandas as pd

from .errors import AmbiguousOrNotFound, DataAccessFailure
from .model import (
    Account,
    AccountType,
    Budget,
    Category,
    ExchangeRate,
    ItemStatus,
    MainCategory,
    MainCategoryType,
    Transaction,
    sign_factor,
)
from .periods import TimeWindow

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for MM Ledger.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite ledger file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class AccountFilter:
    """
    Filters used to list accounts.

    Attributes
    ----------
    name_contains:
        Case-sensitive substring of the account name.
    type:
        Restrict to one account type.
    currency:
        Exact currency code.
    institution_contains:
        Case-sensitive substring of the institution name.
    status:
        Account status to keep. ``None`` keeps every account.
    """

    name_contains: str | None = None
    type: AccountType | None = None
    currency: str | None = None
    institution_contains: str | None = None
    status: ItemStatus | None = ItemStatus.OPEN


@dataclass(frozen=True)
class MainCategoryFilter:
    name_contains: str | None = None
    type: MainCategoryType | None = None
    status: ItemStatus | None = ItemStatus.OPEN


@dataclass(frozen=True)
class CategoryFilter:
    """
    Filters used to list categories.

    ``status`` applies to the category itself; a category of a closed main
    category is still listed when it is open.
    """

    name_contains: str | None = None
    main_category_contains: str | None = None
    main_category_type: MainCategoryType | None = None
    status: ItemStatus | None = ItemStatus.OPEN


@dataclass(frozen=True)
class TransactionFilter:
    """
    Filters used to list transactions.

    Ids are the resolved form of a name filter; the ``*_contains`` fields
    match names directly and may select several entities.

    Attributes
    ----------
    window:
        Time window on the transaction date.
    currency:
        Exact currency code of the account.
    """

    window: TimeWindow | None = None
    account_id: int | None = None
    category_id: int | None = None
    main_category_id: int | None = None
    account_contains: str | None = None
    category_contains: str | None = None
    main_category_contains: str | None = None
    main_category_type: MainCategoryType | None = None
    currency: str | None = None


@dataclass(frozen=True)
class BudgetFilter:
    window: TimeWindow | None = None
    category_id: int | None = None
    category_contains: str | None = None


@dataclass
class _Where:
    """Accumulates AND-ed SQL predicates and their bound parameters."""

    clauses: list[str] = field(default_factory=list)
    params: list[object] = field(default_factory=list)

    def add(self, clause: str, *params: object) -> None:
        self.clauses.append(clause)
        self.params.extend(params)

    def add_if(self, value: object, clause: str) -> None:
        if value is not None:
            self.add(clause, value)

    def add_window(
        self, window: TimeWindow | None, year_col: str, month_col: str, day_col: str
    ) -> None:
        if window is None:
            return
        clause, params = window.sql(year_col, month_col, day_col)
        self.add(clause, *params)

    def sql(self) -> str:
        if not self.clauses:
            return "1 = 1"
        return " AND ".join(self.clauses)


# SQL expressions deriving integer date parts from the ISO date column.
_T_YEAR = "CAST(substr(t.date, 1, 4) AS INTEGER)"
_T_MONTH = "CAST(substr(t.date, 6, 2) AS INTEGER)"
_T_DAY = "CAST(substr(t.date, 9, 2) AS INTEGER)"

_ACCOUNT_COLUMNS = [
    "id",
    "name",
    "description",
    "institution",
    "type",
    "currency",
    "status",
]

_TRANSACTION_COLUMNS = [
    "id",
    "date",
    "year",
    "month",
    "day",
    "account_id",
    "account",
    "account_type",
    "currency",
    "category_id",
    "category",
    "main_category_id",
    "main_category",
    "main_category_type",
    "description",
    "value",
]

_BUDGET_COLUMNS = [
    "year",
    "month",
    "category_id",
    "category",
    "main_category_id",
    "main_category",
    "main_category_type",
    "value",
    "currency",
]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig, *, create: bool = False) -> sqlite3.Connection:
    """
    Open a read-write SQLite connection with foreign keys enabled.

    The ledger file must already exist unless ``create`` is True (only
    ``init_database`` creates it). The caller is responsible for closing
    the connection.

    Raises
    ------
    DataAccessFailure
        If the file cannot be opened.
    """
    _ensure_sqlite(cfg)
    mode = "rwc" if create else "rw"
    uri = f"{Path(cfg.path).resolve().as_uri()}?mode={mode}"
    try:
        conn = sqlite3.connect(uri, uri=True)
    except sqlite3.Error as exc:
        raise DataAccessFailure(f"cannot open ledger file {cfg.path}: {exc}") from exc
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn



def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they do not exist yet (idempotent)."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS accounts (
            id          INTEGER PRIMARY KEY,
            name        TEXT    NOT NULL,
            description TEXT,
            institution TEXT,
            type        INTEGER NOT NULL,
            currency    TEXT    NOT NULL,
            status      INTEGER NOT NULL DEFAULT 1
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS main_categories (
            id     INTEGER PRIMARY KEY,
            name   TEXT    NOT NULL,
            type   INTEGER NOT NULL,
            status INTEGER NOT NULL DEFAULT 1
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS categories (
            id               INTEGER PRIMARY KEY,
            name             TEXT    NOT NULL,
            main_category_id INTEGER NOT NULL,
            status           INTEGER NOT NULL DEFAULT 1,

            FOREIGN KEY (main_category_id) REFERENCES main_categories(id)
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id          INTEGER PRIMARY KEY,
            date        TEXT    NOT NULL,  -- ISO date 'YYYY-MM-DD'
            account_id  INTEGER NOT NULL,
            category_id INTEGER NOT NULL,
            description TEXT,
            value       REAL    NOT NULL,

            FOREIGN KEY (account_id) REFERENCES accounts(id),
            FOREIGN KEY (category_id) REFERENCES categories(id)
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS budgets (
            year        INTEGER NOT NULL,
            month       INTEGER NOT NULL,
            category_id INTEGER NOT NULL,
            value       REAL    NOT NULL,
            currency    TEXT    NOT NULL,

            PRIMARY KEY (year, month, category_id),
            FOREIGN KEY (category_id) REFERENCES categories(id)
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS exchange_rates (
            currency_from TEXT NOT NULL,
            currency_to   TEXT NOT NULL,
            rate          REAL NOT NULL,

            PRIMARY KEY (currency_from, currency_to)
        );
        """
    )

    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_transactions_date
            ON transactions(date);
        """
    )

    conn.commit()


def _to_iso_date(value) -> str:
    """Convert a date-like value to ISO 'YYYY-MM-DD' string."""
    if isinstance(value, date):
        return value.isoformat()[:10]
    return date.fromisoformat(str(value)).isoformat()


def _normalize_currency(code: str) -> str:
    code = code.strip().upper()
    if not code:
        raise ValueError("Currency code cannot be empty.")
    return code


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the ledger schema if needed.

    - Creates the SQLite file (and its parent directory) if missing.
    - Creates every table and index if missing.
    - Idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg, create=True)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def insert_account(
    cfg: DatabaseConfig,
    name: str,
    account_type: AccountType,
    currency: str,
    *,
    description: str | None = None,
    institution: str | None = None,
) -> Account:
    """Insert a new open account and return it."""
    currency = _normalize_currency(currency)
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO accounts (name, description, institution, type, currency, status)
            VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                name,
                description,
                institution,
                int(account_type),
                currency,
                int(ItemStatus.OPEN),
            ),
        )
        account_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    return Account(
        id=account_id,
        name=name,
        type=AccountType(account_type),
        currency=currency,
        status=ItemStatus.OPEN,
        description=description,
        institution=institution,
    )


def insert_main_category(
    cfg: DatabaseConfig, name: str, category_type: MainCategoryType
) -> MainCategory:
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            "INSERT INTO main_categories (name, type, status) VALUES (?, ?, ?);",
            (name, int(category_type), int(ItemStatus.OPEN)),
        )
        main_category_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    return MainCategory(
        id=main_category_id, name=name, type=MainCategoryType(category_type)
    )


def insert_category(
    cfg: DatabaseConfig, name: str, main_category_id: int
) -> Category:
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO categories (name, main_category_id, status)
            VALUES (?, ?, ?);
            """,
            (name, main_category_id, int(ItemStatus.OPEN)),
        )
        category_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    return Category(id=category_id, name=name, main_category_id=main_category_id)


def _main_category_type_of(
    conn: sqlite3.Connection, category_id: int
) -> MainCategoryType:
    row = conn.execute(
        """
        SELECT mc.type
          FROM categories AS c
          JOIN main_categories AS mc
            ON c.main_category_id = mc.id
         WHERE c.id = ?;
        """,
        (category_id,),
    ).fetchone()
    if row is None:
        raise ValueError(f"Category #{category_id} does not exist.")
    return MainCategoryType(row[0])


def insert_transaction(
    cfg: DatabaseConfig,
    when: date | str,
    account_id: int,
    category_id: int,
    description: str,
    value: float,
) -> Transaction:
    """
    Insert a transaction.

    ``value`` is the amount as entered by the user. It is stored multiplied
    by ``sign_factor`` of the category's main category type, so a cost of
    50 is stored as -50.

    Raises
    ------
    ValueError
        If the category or the account does not exist.
    """
    iso_date = _to_iso_date(when)

    conn = _connect(cfg)
    try:
        if conn.execute(
            "SELECT 1 FROM accounts WHERE id = ?;", (account_id,)
        ).fetchone() is None:
            raise ValueError(f"Account #{account_id} does not exist.")

        stored = float(value) * sign_factor(_main_category_type_of(conn, category_id))
        cur = conn.execute(
            """
            INSERT INTO transactions (date, account_id, category_id, description, value)
            VALUES (?, ?, ?, ?, ?);
            """,
            (iso_date, account_id, category_id, description, stored),
        )
        transaction_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    return Transaction(
        id=transaction_id,
        date=date.fromisoformat(iso_date),
        account_id=account_id,
        category_id=category_id,
        description=description,
        value=stored,
    )


def insert_budget(
    cfg: DatabaseConfig,
    year: int,
    month: int,
    category_id: int,
    value: float,
    currency: str,
) -> Budget:
    """
    Insert or replace the budget of a category for one month.

    The value is sign-adjusted like transactions, so a cost budget of 100
    is stored as -100.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid budget month: {month}")
    currency = _normalize_currency(currency)

    conn = _connect(cfg)
    try:
        stored = float(value) * sign_factor(_main_category_type_of(conn, category_id))
        conn.execute(
            """
            INSERT INTO budgets (year, month, category_id, value, currency)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (year, month, category_id)
            DO UPDATE SET value = excluded.value, currency = excluded.currency;
            """,
            (year, month, category_id, stored, currency),
        )
        conn.commit()
    finally:
        conn.close()

    return Budget(
        year=year, month=month, category_id=category_id, value=stored, currency=currency
    )


def set_exchange_rate(
    cfg: DatabaseConfig, currency_from: str, currency_to: str, rate: float
) -> ExchangeRate:
    """
    Insert or update the directional rate ``currency_from -> currency_to``.

    The reverse direction is not touched.
    """
    currency_from = _normalize_currency(currency_from)
    currency_to = _normalize_currency(currency_to)
    if currency_from == currency_to:
        raise ValueError("An exchange rate needs two different currencies.")
    if rate <= 0:
        raise ValueError(f"Exchange rate must be positive, got {rate}.")

    conn = _connect(cfg)
    try:
        conn.execute(
            """
            INSERT INTO exchange_rates (currency_from, currency_to, rate)
            VALUES (?, ?, ?)
            ON CONFLICT (currency_from, currency_to)
            DO UPDATE SET rate = excluded.rate;
            """,
            (currency_from, currency_to, float(rate)),
        )
        conn.commit()
    finally:
        conn.close()

    return ExchangeRate(
        currency_from=currency_from, currency_to=currency_to, rate=float(rate)
    )


def _close_item(cfg: DatabaseConfig, table: str, label: str, item_id: int) -> None:
    conn = _connect(cfg)
    try:
        cur = conn.execute(
            f"UPDATE {table} SET status = ? WHERE id = ?;",
            (int(ItemStatus.CLOSED), item_id),
        )
        if cur.rowcount == 0:
            raise ValueError(f"{label} #{item_id} does not exist.")
        conn.commit()
    finally:
        conn.close()
    logger.debug("Closed %s #%s", label.lower(), item_id)


def close_account(cfg: DatabaseConfig, account_id: int) -> None:
    """
    Mark an account as closed.

    Nothing is deleted: its transactions still count in the net value, but
    the account no longer appears in balances, listings or name lookups.
    Closing an already closed account is a no-op.

    Raises
    ------
    ValueError
        If the account does not exist.
    """
    _close_item(cfg, "accounts", "Account", account_id)


def close_main_category(cfg: DatabaseConfig, main_category_id: int) -> None:
    _close_item(cfg, "main_categories", "Main category", main_category_id)


def close_category(cfg: DatabaseConfig, category_id: int) -> None:
    _close_item(cfg, "categories", "Category", category_id)



# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


class LedgerSnapshot:
    """
    Read-only, consistent view of a ledger file.

    Use it as a context manager::

        with LedgerSnapshot(cfg) as snapshot:
            accounts = snapshot.list_accounts(AccountFilter())

    Every query inside the ``with`` block runs in the same read
    transaction. Any ``sqlite3.Error`` is re-raised as
    ``DataAccessFailure``.
    """

    def __init__(self, cfg: DatabaseConfig) -> None:
        _ensure_sqlite(cfg)
        self._cfg = cfg
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "LedgerSnapshot":
        uri = f"{Path(self._cfg.path).resolve().as_uri()}?mode=ro"
        try:
            self._conn = sqlite3.connect(uri, uri=True)
            self._conn.execute("BEGIN;")
        except sqlite3.Error as exc:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
            raise DataAccessFailure(
                f"cannot open ledger file {self._cfg.path}: {exc}"
            ) from exc
        logger.debug("Opened read snapshot on %s", self._cfg.path)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._conn is not None:
            try:
                self._conn.rollback()
            finally:
                self._conn.close()
                self._conn = None
        logger.debug("Closed read snapshot on %s", self._cfg.path)

    def _fetch(self, query: str, params: list[object] | tuple = ()) -> list[tuple]:
        if self._conn is None:
            raise RuntimeError("LedgerSnapshot used outside of its 'with' block.")
        logger.debug("SQL: %s | params=%s", " ".join(query.split()), list(params))
        try:
            return self._conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise DataAccessFailure(f"query failed: {exc}") from exc

    # -- listings -----------------------------------------------------------

    def list_accounts(self, filters: AccountFilter | None = None) -> pd.DataFrame:
        """
        Return accounts matching ``filters`` ordered by type, then name.

        Result columns
        --------------
        id, name, description, institution, type, currency, status
        """
        filters = filters or AccountFilter()
        where = _Where()
        where.add_if(filters.name_contains, "instr(name, ?) > 0")
        if filters.type is not None:
            where.add("type = ?", int(filters.type))
        where.add_if(filters.currency, "currency = ?")
        where.add_if(filters.institution_contains, "instr(institution, ?) > 0")
        if filters.status is not None:
            where.add("status = ?", int(filters.status))

        rows = self._fetch(
            f"""
            SELECT id, name, description, institution, type, currency, status
              FROM accounts
             WHERE {where.sql()}
             ORDER BY type, name, id;
            """,
            where.params,
        )
        return pd.DataFrame(rows, columns=_ACCOUNT_COLUMNS)

    def list_transactions(
        self, filters: TransactionFilter | None = None
    ) -> pd.DataFrame:
        """
        Return transactions joined with their account, category and main
        category, ordered by date then id.

        Result columns
        --------------
        id, date (ISO text), year, month, day, account_id, account,
        account_type, currency, category_id, category, main_category_id,
        main_category, main_category_type, description, value
        """
        filters = filters or TransactionFilter()
        where = _Where()
        where.add_window(filters.window, _T_YEAR, _T_MONTH, _T_DAY)
        where.add_if(filters.account_id, "a.id = ?")
        where.add_if(filters.category_id, "c.id = ?")
        where.add_if(filters.main_category_id, "mc.id = ?")
        where.add_if(filters.account_contains, "instr(a.name, ?) > 0")
        where.add_if(filters.category_contains, "instr(c.name, ?) > 0")
        where.add_if(filters.main_category_contains, "instr(mc.name, ?) > 0")
        if filters.main_category_type is not None:
            where.add("mc.type = ?", int(filters.main_category_type))
        where.add_if(filters.currency, "a.currency = ?")

        rows = self._fetch(
            f"""
            SELECT
                t.id,
                t.date,
                {_T_YEAR},
                {_T_MONTH},
                {_T_DAY},
                a.id,
                a.name,
                a.type,
                a.currency,
                c.id,
                c.name,
                mc.id,
                mc.name,
                mc.type,
                t.description,
                t.value
              FROM transactions AS t
              JOIN accounts AS a
                ON t.account_id = a.id
              JOIN categories AS c
                ON t.category_id = c.id
              JOIN main_categories AS mc
                ON c.main_category_id = mc.id
             WHERE {where.sql()}
             ORDER BY t.date, t.id;
            """,
            where.params,
        )
        return pd.DataFrame(rows, columns=_TRANSACTION_COLUMNS)

    def list_budgets(self, filters: BudgetFilter | None = None) -> pd.DataFrame:
        """
        Return budgets joined with their category and main category.

        A budget covers a whole month, so it is treated as dated on day 1
        when a cumulative window is applied.

        Result columns
        --------------
        year, month, category_id, category, main_category_id, main_category,
        main_category_type, value, currency
        """
        filters = filters or BudgetFilter()
        where = _Where()
        where.add_window(filters.window, "b.year", "b.month", "1")
        where.add_if(filters.category_id, "c.id = ?")
        where.add_if(filters.category_contains, "instr(c.name, ?) > 0")

        rows = self._fetch(
            f"""
            SELECT
                b.year,
                b.month,
                c.id,
                c.name,
                mc.id,
                mc.name,
                mc.type,
                b.value,
                b.currency
              FROM budgets AS b
              JOIN categories AS c
                ON b.category_id = c.id
              JOIN main_categories AS mc
                ON c.main_category_id = mc.id
             WHERE {where.sql()}
             ORDER BY b.year, b.month, c.id;
            """,
            where.params,
        )
        return pd.DataFrame(rows, columns=_BUDGET_COLUMNS)

    def list_exchange_rates(self, to: str) -> dict[str, float]:
        """Return ``{currency_from: rate}`` for every rate towards ``to``."""
        rows = self._fetch(
            """
            SELECT currency_from, rate
              FROM exchange_rates
             WHERE currency_to = ?
             ORDER BY currency_from;
            """,
            (to,),
        )
        return {currency_from: float(rate) for currency_from, rate in rows}

    def list_all_exchange_rates(self) -> pd.DataFrame:
        rows = self._fetch(
            """
            SELECT currency_from, currency_to, rate
              FROM exchange_rates
             ORDER BY currency_from, currency_to;
            """
        )
        return pd.DataFrame(rows, columns=["currency_from", "currency_to", "rate"])

    def list_main_categories(
        self, filters: MainCategoryFilter | None = None
    ) -> pd.DataFrame:
        """
        Return main categories ordered by type (income first), then name.

        Result columns
        --------------
        id, name, type, status
        """
        filters = filters or MainCategoryFilter()
        where = _Where()
        where.add_if(filters.name_contains, "instr(name, ?) > 0")
        if filters.type is not None:
            where.add("type = ?", int(filters.type))
        if filters.status is not None:
            where.add("status = ?", int(filters.status))

        rows = self._fetch(
            f"""
            SELECT id, name, type, status
              FROM main_categories
             WHERE {where.sql()}
             ORDER BY type DESC, name, id;
            """,
            where.params,
        )
        return pd.DataFrame(rows, columns=["id", "name", "type", "status"])

    def list_categories(self, filters: CategoryFilter | None = None) -> pd.DataFrame:
        """
        Return categories with their main category, grouped like
        ``list_main_categories``.

        Result columns
        --------------
        id, name, main_category_id, main_category, main_category_type, status
        """
        filters = filters or CategoryFilter()
        where = _Where()
        where.add_if(filters.name_contains, "instr(c.name, ?) > 0")
        where.add_if(filters.main_category_contains, "instr(mc.name, ?) > 0")
        if filters.main_category_type is not None:
            where.add("mc.type = ?", int(filters.main_category_type))
        if filters.status is not None:
            where.add("c.status = ?", int(filters.status))

        rows = self._fetch(
            f"""
            SELECT c.id, c.name, mc.id, mc.name, mc.type, c.status
              FROM categories AS c
              JOIN main_categories AS mc
                ON c.main_category_id = mc.id
             WHERE {where.sql()}
             ORDER BY mc.type DESC, mc.name, c.name, c.id;
            """,
            where.params,
        )
        return pd.DataFrame(
            rows,
            columns=[
                "id",
                "name",
                "main_category_id",
                "main_category",
                "main_category_type",
                "status",
            ],
        )

    # -- name resolution ----------------------------------------------------

    def _resolve_open(self, table: str, entity: str, query: str) -> int:
        rows = self._fetch(
            f"""
            SELECT id
              FROM {table}
             WHERE status = ?
               AND instr(name, ?) > 0
             ORDER BY id;
            """,
            (int(ItemStatus.OPEN), query),
        )
        if len(rows) != 1:
            raise AmbiguousOrNotFound(entity, query, len(rows))
        logger.debug("Resolved %s %r to id %s", entity, query, rows[0][0])
        return int(rows[0][0])

    def resolve_account_id(self, name: str) -> int:
        """
        Return the id of the single open account whose name contains ``name``.

        Raises
        ------
        AmbiguousOrNotFound
            If zero or several open accounts match.
        """
        return self._resolve_open("accounts", "account", name)

    def resolve_category_id(self, name: str) -> int:
        return self._resolve_open("categories", "category", name)

    def resolve_main_category_id(self, name: str) -> int:
        return self._resolve_open("main_categories", "main category", name)


def open_snapshot(cfg: DatabaseConfig) -> LedgerSnapshot:
    """Return an unopened snapshot; use it in a ``with`` statement."""
    return LedgerSnapshot(cfg)
