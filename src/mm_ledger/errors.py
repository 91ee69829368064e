# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Exceptions raised by the MM Ledger report engine and data layer.

Every error is terminal for the report being computed: reports are built
completely before anything is rendered, so a raised error never leaves a
partial report behind. The CLI turns any ``LedgerError`` into a message on
stderr and exit status 1.
"""

from collections.abc import Iterable


class LedgerError(Exception):
    """Base class for all errors reported to the user."""


class MissingRequiredParameter(LedgerError):
    """A required input (e.g. reporting currency) is absent and has no default."""

    def __init__(self, parameter: str, hint: str = "") -> None:
        self.parameter = parameter
        msg = f"missing {parameter}."
        if hint:
            msg = f"{msg} {hint}"
        super().__init__(msg)


class InvalidDate(LedgerError, ValueError):
    """A date string is unparsable or has the wrong granularity for a report."""

    def __init__(self, text: str, expected: str) -> None:
        self.text = text
        self.expected = expected
        super().__init__(
            f"wrong date given: {text!r}. Specify it in format: {expected}."
        )


class AmbiguousOrNotFound(LedgerError):
    """
    A name filter did not resolve to exactly one open entity.

    Attributes
    ----------
    entity:
        Human-readable entity kind ("account", "category", "main category").
    query:
        The substring given by the user.
    matches:
        Number of open entities whose name contains ``query``.
    """

    def __init__(self, entity: str, query: str, matches: int) -> None:
        self.entity = entity
        self.query = query
        self.matches = matches
        if matches == 0:
            reason = "not found"
        else:
            reason = f"ambiguous ({matches} matches)"
        super().__init__(f"given {entity} {reason}: {query}")


class MissingExchangeRate(LedgerError):
    """One or more currencies have no direct rate to the reporting currency."""

    def __init__(self, reporting_currency: str, currencies: Iterable[str]) -> None:
        self.reporting_currency = reporting_currency
        self.currencies = sorted(set(currencies))
        self.pairs = [f"{c}-{reporting_currency}" for c in self.currencies]
        super().__init__(
            "currencies exchange rate(s) missing: "
            f"{', '.join(self.pairs)} - add them first."
        )


class DataAccessFailure(LedgerError):
    """The ledger file could not be opened or a query failed."""
