# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
MM Ledger
---------

A personal finance ledger kept in a local SQLite file. It tracks accounts,
categorized transactions, multi-currency exchange rates and monthly
budgets, and prints fixed-width text reports.

Main capabilities:
- accounts balance and assets summary on any date,
- transactions, categories and main categories balances over a
  cumulative window, a month or a year,
- budget against actual reports per category or main category,
- running net value per month,
- strict multi-currency conversion through directional exchange rates
  (every missing rate is reported at once, none is ever guessed).

MM Ledger separates data access (db), computation (currency, periods,
engine, reports), configuration (TOML) and presentation (views, CLI).


Version: 0.1.0

Usage:
    python -m mm_ledger.cli --help
"""

__all__ = ["currency", "db", "engine", "periods", "reports", "views"]

__version__ = "0.1.0"
