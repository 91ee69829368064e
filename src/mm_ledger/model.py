# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Domain model for MM Ledger.

This module holds the small vocabulary shared by the data layer, the
report algorithms and the CLI:

- enumerations for account types, main category types and item statuses,
  with their display labels and short aliases,
- the sign convention applied to values of each main category type,
- frozen dataclasses mirroring the rows stored in the ledger file.

The report engine only reads these records. They are created through the
insert helpers of ``db.py``.
"""

from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from typing import Optional


class AccountType(IntEnum):
    """Kind of account. Values are the ones stored in the database."""

    TRANSACTIONAL = 1
    SAVING = 2
    PROPERTY = 3
    INVESTMENT = 4
    LOAN = 5

    @property
    def label(self) -> str:
        return _ACCOUNT_TYPE_LABELS[self]

    @classmethod
    def parse(cls, text: str) -> "AccountType":
        """Return the account type for a full name or a one-letter alias."""
        key = text.strip().lower()
        for member, aliases in _ACCOUNT_TYPE_ALIASES.items():
            if key in aliases:
                return member
        raise ValueError(
            f"Unknown account type: {text!r}. "
            "Expected one of: transactional, saving, property, investment, loan."
        )


_ACCOUNT_TYPE_LABELS = {
    AccountType.TRANSACTIONAL: "Operations",
    AccountType.SAVING: "Savings",
    AccountType.PROPERTY: "Property",
    AccountType.INVESTMENT: "Investment",
    AccountType.LOAN: "Loan",
}

_ACCOUNT_TYPE_ALIASES = {
    AccountType.TRANSACTIONAL: {"t", "transact", "transactional", "operations"},
    AccountType.SAVING: {"s", "saving", "savings"},
    AccountType.PROPERTY: {"p", "property"},
    AccountType.INVESTMENT: {"i", "investment"},
    AccountType.LOAN: {"l", "loan"},
}


class MainCategoryType(IntEnum):
    """Type of a main category. Values are the ones stored in the database."""

    COST = -1
    TRANSFER = 0
    INCOME = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, text: str) -> "MainCategoryType":
        """Return the main category type for a full name or a one-letter alias."""
        key = text.strip().lower()
        for member in cls:
            if key in {member.name.lower(), member.name[0].lower()}:
                return member
        raise ValueError(
            f"Unknown main category type: {text!r}. "
            "Expected one of: cost, transfer, income."
        )


class ItemStatus(IntEnum):
    CLOSED = 0
    OPEN = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


def sign_factor(main_category_type: MainCategoryType) -> int:
    """
    Return the multiplier applied to a value entered for a main category type.

    Costs are stored as negative values, incomes and transfers keep the sign
    given by the user. This is the single place where the convention lives:
    the insert helpers in ``db.py`` apply it once, and reports simply sum
    stored values.
    """
    if main_category_type == MainCategoryType.COST:
        return -1
    if main_category_type in (MainCategoryType.TRANSFER, MainCategoryType.INCOME):
        return 1
    return 0


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Account:
    """
    A ledger account.

    Attributes
    ----------
    currency:
        ISO-like currency code of every transaction booked on the account.
        It cannot be changed once the account exists.
    """

    id: int
    name: str
    type: AccountType
    currency: str
    status: ItemStatus = ItemStatus.OPEN
    description: Optional[str] = None
    institution: Optional[str] = None


@dataclass(frozen=True)
class MainCategory:
    id: int
    name: str
    type: MainCategoryType
    status: ItemStatus = ItemStatus.OPEN


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    main_category_id: int
    status: ItemStatus = ItemStatus.OPEN


@dataclass(frozen=True)
class Transaction:
    """A booked transaction. ``value`` is already sign-adjusted."""

    id: int
    date: date
    account_id: int
    category_id: int
    description: str
    value: float


@dataclass(frozen=True)
class Budget:
    """Monthly limit for one category. ``value`` is already sign-adjusted."""

    year: int
    month: int
    category_id: int
    value: float
    currency: str


@dataclass(frozen=True)
class ExchangeRate:
    """Directional rate: one unit of ``currency_from`` is ``rate`` of ``currency_to``."""

    currency_from: str
    currency_to: str
    rate: float
