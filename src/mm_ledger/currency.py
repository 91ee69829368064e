# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Currency conversion for reports.

Every report that compares values across accounts first converts them into
a single reporting currency. Conversion factors come exclusively from the
stored exchange rates whose ``currency_to`` is the reporting currency:

- the reporting currency itself converts with a factor of 1.0,
- any other currency needs a direct ``currency_from -> reporting`` rate.

Rates are directional. A rate B -> A does not imply A -> B, and no path
through a third currency is ever used. When a rate is missing the whole
report is refused and every missing pair is listed at once.
"""

import logging
from collections.abc import Iterable, Mapping

import pandas as pd

from .errors import MissingExchangeRate

logger = logging.getLogger(__name__)


def find_missing_currencies(
    reporting_currency: str,
    used_currencies: Iterable[str],
    rates: Mapping[str, float],
) -> list[str]:
    """
    Return the sorted, de-duplicated list of currencies lacking a rate.

    Args:
        reporting_currency: Currency all values are converted into.
        used_currencies: Currencies found in the records being reported;
            duplicates are expected and collapsed.
        rates: Mapping ``currency_from -> rate`` for rates towards
            ``reporting_currency`` (as returned by
            ``LedgerSnapshot.list_exchange_rates``).
    """
    missing = {
        cur
        for cur in used_currencies
        if cur != reporting_currency and cur not in rates
    }
    return sorted(missing)


def resolve_conversion_factors(
    reporting_currency: str,
    used_currencies: Iterable[str],
    rates: Mapping[str, float],
) -> dict[str, float]:
    """
    Return ``{currency -> factor into reporting_currency}`` for used currencies.

    Raises:
        MissingExchangeRate: if at least one used currency has no direct rate
            to the reporting currency. The exception names all of them.
    """
    used = set(used_currencies)
    missing = find_missing_currencies(reporting_currency, used, rates)
    if missing:
        logger.debug(
            "Missing exchange rates towards %s: %s", reporting_currency, missing
        )
        raise MissingExchangeRate(reporting_currency, missing)

    factors: dict[str, float] = {}
    for cur in sorted(used):
        if cur == reporting_currency:
            factors[cur] = 1.0
        else:
            factors[cur] = float(rates[cur])
    logger.debug("Conversion factors towards %s: %s", reporting_currency, factors)
    return factors


def apply_conversion(
    df: pd.DataFrame,
    factors: Mapping[str, float],
    *,
    currency_column: str = "currency",
    value_column: str = "value",
) -> pd.DataFrame:
    """
    Return a copy of ``df`` with ``value_column`` converted using ``factors``.

    The currency column is left untouched: it still tells where the value
    came from. Every currency in ``df`` must have a factor (this is what
    ``resolve_conversion_factors`` guarantees).
    """
    out = df.copy()
    if out.empty:
        return out
    factor = out[currency_column].map(dict(factors))
    if factor.isna().any():
        unknown = sorted(set(out.loc[factor.isna(), currency_column]))
        raise KeyError(f"No conversion factor for currencies: {unknown}")
    out[value_column] = out[value_column].astype(float) * factor.astype(float)
    return out
