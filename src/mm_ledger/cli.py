# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for MM Ledger.

The CLI is intentionally thin: it does not implement any report logic
itself. It loads the configuration, opens the ledger and dispatches to
the report algorithms (``reports.py``) and their views (``views.py``).

Commands
--------

- ``init``                 create the ledger file and its schema,
- ``add <kind>``           add an account, a main category, a category,
                           a transaction, a budget or an exchange rate,
- ``close <kind>``         close an account, a main category or a category,
- ``list <kind>``          list accounts, main categories or categories
                           (open ones unless ``--all`` is given),
- ``report <kind>``        compute and print one of the eight reports,
- ``rates``                list stored exchange rates.

Configuration and overrides
---------------------------

``mm_ledger_config.toml`` in the current directory is read when present
(``--config`` selects another file). ``--file`` overrides the ledger path
of the configuration, and is enough on its own when no configuration file
exists.

Errors
------

Any ``LedgerError`` (invalid date, unresolved name, missing exchange rate,
unreadable ledger...) is turned into ``SystemExit`` with the message
prefixed by ``mm-ledger:``. The message goes to stderr and the exit status
is 1. Nothing is printed before a report is fully computed.

Usage
-----

    python -m mm_ledger.cli --file ledger.sqlite init
    python -m mm_ledger.cli report assets --currency EUR --date 2024-12-31
    python -m mm_ledger.cli report budget --period 2024-03
"""

import argparse
import logging
import os
import sqlite3
from datetime import date
from pathlib import Path
from typing import Optional

from . import __version__
from .config import (
    DEFAULT_CONFIG_FILENAME,
    AppConfig,
    default_app_config,
    load_app_config,
)
from .db import (
    AccountFilter,
    CategoryFilter,
    MainCategoryFilter,
    close_account,
    close_category,
    close_main_category,
    init_database,
    insert_account,
    insert_budget,
    insert_category,
    insert_main_category,
    insert_transaction,
    open_snapshot,
    set_exchange_rate,
)
from .errors import InvalidDate, LedgerError
from .model import AccountType, ItemStatus, MainCategoryType
from .periods import DateGranularity, parse_date_string, resolve_full_date_window
from .reports import (
    accounts_balance,
    assets_summary,
    budget_categories,
    budget_main_categories,
    categories_balance,
    main_categories_balance,
    net_value,
    transactions_balance,
)
from .views import (
    render_account_list,
    render_category_list,
    render_exchange_rates,
    render_main_category_list,
    render_report,
)

PROG = "mm-ledger"
LOG_LEVEL_ENV = "MM_LEDGER_LOG_LEVEL"

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument types
# ---------------------------------------------------------------------------


def _account_type(text: str) -> AccountType:
    try:
        return AccountType.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _main_category_type(text: str) -> MainCategoryType:
    try:
        return MainCategoryType.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from exc
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {text!r}")
    return value


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_currency_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--currency",
        "-c",
        help=(
            "Reporting currency. "
            "If omitted, [reporting] default_currency from the config is used."
        ),
    )


def _add_date_argument(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("--date", "-d", help=help_text)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "MM Ledger - Personal finance ledger & reporting. "
            "Tracks accounts, categorized transactions, exchange rates and "
            "monthly budgets, and prints balance and budget reports."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of mm_ledger and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            f"If omitted, '{DEFAULT_CONFIG_FILENAME}' in the current directory "
            "is used when it exists."
        ),
    )
    ap.add_argument(
        "--file",
        "-f",
        dest="ledger_path",
        help="Path to the ledger file. Overrides [database] path from the config.",
    )
    ap.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help=f"Enable debug logging on stderr (see also ${LOG_LEVEL_ENV}).",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # init
    # ------------------------------------------------------------------
    subparsers.add_parser("init", help="Create the ledger file and its schema.")

    # ------------------------------------------------------------------
    # add
    # ------------------------------------------------------------------
    add_parser = subparsers.add_parser("add", help="Add an item to the ledger.")
    add_subparsers = add_parser.add_subparsers(dest="add_command", metavar="kind")

    add_account = add_subparsers.add_parser("account", help="Add an account.")
    add_account.add_argument("name")
    add_account.add_argument(
        "--type",
        "-t",
        dest="account_type",
        type=_account_type,
        required=True,
        help="transactional, saving, property, investment or loan (or t/s/p/i/l).",
    )
    add_account.add_argument("--currency", "-c", required=True)
    add_account.add_argument("--description")
    add_account.add_argument("--institution")

    add_main = add_subparsers.add_parser(
        "main-category", help="Add a main category."
    )
    add_main.add_argument("name")
    add_main.add_argument(
        "--type",
        "-t",
        dest="main_category_type",
        type=_main_category_type,
        required=True,
        help="cost, transfer or income (or c/t/i).",
    )

    add_category = add_subparsers.add_parser("category", help="Add a category.")
    add_category.add_argument("name")
    add_category.add_argument(
        "--main-category",
        "-m",
        required=True,
        help="Name (or unique part of the name) of an open main category.",
    )

    add_transaction = add_subparsers.add_parser(
        "transaction", help="Add a transaction."
    )
    add_transaction.add_argument("--account", "-a", required=True)
    add_transaction.add_argument("--category", "-g", required=True)
    add_transaction.add_argument(
        "--value",
        type=float,
        required=True,
        help="Amount as entered; costs are stored as negative values.",
    )
    add_transaction.add_argument("--description", default="")
    _add_date_argument(add_transaction, "Transaction date (YYYY-MM-DD), default today.")

    add_budget = add_subparsers.add_parser("budget", help="Set a monthly budget.")
    add_budget.add_argument("--category", "-g", required=True)
    add_budget.add_argument("--period", "-p", required=True, help="YYYY-MM")
    add_budget.add_argument("--value", type=float, required=True)
    add_budget.add_argument("--currency", "-c", required=True)

    add_rate = add_subparsers.add_parser(
        "rate", help="Set the exchange rate FROM -> TO (one FROM = RATE TO)."
    )
    add_rate.add_argument("currency_from", metavar="FROM")
    add_rate.add_argument("currency_to", metavar="TO")
    add_rate.add_argument("rate", type=_positive_float)

    # ------------------------------------------------------------------
    # report
    # ------------------------------------------------------------------
    report_parser = subparsers.add_parser("report", help="Print a report.")
    report_subparsers = report_parser.add_subparsers(
        dest="report_kind", metavar="kind"
    )

    rep = report_subparsers.add_parser(
        "accounts", help="Balance of open accounts in their own currency."
    )
    _add_date_argument(rep, "Balance date (YYYY-MM-DD), default today.")

    rep = report_subparsers.add_parser(
        "assets", help="Converted account balances with subtotals per type."
    )
    _add_currency_argument(rep)
    _add_date_argument(rep, "Balance date (YYYY-MM-DD), default today.")

    rep = report_subparsers.add_parser(
        "transactions", help="List of transactions matching filters."
    )
    _add_currency_argument(rep)
    _add_date_argument(
        rep, "YYYY-MM-DD (up to), YYYY-MM or YYYY (during); default today."
    )
    rep.add_argument("--account", "-a")
    rep.add_argument("--category", "-g")
    rep.add_argument("--main-category", "-m")
    rep.add_argument(
        "--type",
        "-t",
        dest="main_category_type",
        type=_main_category_type,
        help="Keep only cost, transfer or income transactions.",
    )
    rep.add_argument(
        "--account-currency",
        help="Keep only transactions of accounts held in this currency.",
    )

    for kind, help_text in (
        ("categories", "Converted sums per category, grouped by type."),
        ("main-categories", "Converted sums per main category, grouped by type."),
        ("net-value", "Running net value at the end of each month."),
    ):
        rep = report_subparsers.add_parser(kind, help=help_text)
        _add_currency_argument(rep)
        if kind == "net-value":
            _add_date_argument(rep, "Up to this date (YYYY-MM-DD), default today.")
        else:
            _add_date_argument(
                rep, "YYYY-MM-DD (up to), YYYY-MM or YYYY (during); default today."
            )

    for kind, help_text in (
        ("budget", "Budget against actual per category."),
        ("budget-main", "Budget against actual per main category."),
    ):
        rep = report_subparsers.add_parser(kind, help=help_text)
        _add_currency_argument(rep)
        rep.add_argument(
            "--period",
            "-p",
            help="YYYY-MM or YYYY, default current month.",
        )

    # ------------------------------------------------------------------
    # close
    # ------------------------------------------------------------------
    close_parser = subparsers.add_parser(
        "close", help="Close an item; its history is kept."
    )
    close_subparsers = close_parser.add_subparsers(
        dest="close_command", metavar="kind"
    )
    for kind in ("account", "main-category", "category"):
        close_item = close_subparsers.add_parser(
            kind, help=f"Close the {kind} given by name or id."
        )
        target = close_item.add_mutually_exclusive_group(required=True)
        target.add_argument(
            "name",
            nargs="?",
            help=f"Name (or unique part of the name) of an open {kind}.",
        )
        target.add_argument("--id", type=int, dest="item_id")

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------
    list_parser = subparsers.add_parser("list", help="List ledger items.")
    list_subparsers = list_parser.add_subparsers(dest="list_kind", metavar="kind")

    lst = list_subparsers.add_parser("accounts", help="List accounts.")
    lst.add_argument("--name", "-n", help="Keep names containing this text.")
    lst.add_argument("--type", "-t", dest="account_type", type=_account_type)
    lst.add_argument("--currency", "-c")
    lst.add_argument("--institution", help="Keep banks containing this text.")

    lst = list_subparsers.add_parser("main-categories", help="List main categories.")
    lst.add_argument("--name", "-n", help="Keep names containing this text.")
    lst.add_argument(
        "--type", "-t", dest="main_category_type", type=_main_category_type
    )

    lst = list_subparsers.add_parser("categories", help="List categories.")
    lst.add_argument("--name", "-n", help="Keep names containing this text.")
    lst.add_argument(
        "--main-category", "-m", help="Keep main categories containing this text."
    )
    lst.add_argument(
        "--type", "-t", dest="main_category_type", type=_main_category_type
    )

    for lst in list_subparsers.choices.values():
        lst.add_argument(
            "--all", action="store_true", help="Include closed items."
        )

    # ------------------------------------------------------------------
    # rates
    # ------------------------------------------------------------------
    subparsers.add_parser("rates", help="List stored exchange rates.")

    return ap


# ---------------------------------------------------------------------------
# Setup helpers
# ---------------------------------------------------------------------------


def _configure_logging(verbose: bool) -> None:
    """Configure root logging from --verbose or $MM_LEDGER_LOG_LEVEL."""
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(args: argparse.Namespace) -> AppConfig:
    if args.config_path:
        config = load_app_config(args.config_path)
    elif Path(DEFAULT_CONFIG_FILENAME).is_file():
        config = load_app_config()
    else:
        config = default_app_config()

    if args.ledger_path:
        config = config.with_database_path(Path(args.ledger_path))
    logger.debug("Using ledger file %s", config.database.path)
    return config


def _print_lines(lines: list[str]) -> None:
    for line in lines:
        print(line)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_init(args: argparse.Namespace, config: AppConfig) -> None:
    init_database(config.database)
    print(f"Ledger ready: {config.database.path}")


def _parse_full_date(text: Optional[str]) -> date:
    """Return the given YYYY-MM-DD date, or today when omitted."""
    window = resolve_full_date_window(text)
    return date(window.year, window.month, window.day)


def _handle_add(args: argparse.Namespace, config: AppConfig) -> None:
    """Dispatch function for the 'add' subcommands."""
    subcmd = getattr(args, "add_command", None)
    cfg = config.database

    if subcmd == "account":
        account = insert_account(
            cfg,
            args.name,
            args.account_type,
            args.currency,
            description=args.description,
            institution=args.institution,
        )
        print(
            f"Added account #{account.id}: {account.name} "
            f"({account.type.label}, {account.currency})"
        )
    elif subcmd == "main-category":
        main_category = insert_main_category(cfg, args.name, args.main_category_type)
        print(
            f"Added main category #{main_category.id}: {main_category.name} "
            f"({main_category.type.label})"
        )
    elif subcmd == "category":
        with open_snapshot(cfg) as snapshot:
            main_category_id = snapshot.resolve_main_category_id(args.main_category)
        category = insert_category(cfg, args.name, main_category_id)
        print(f"Added category #{category.id}: {category.name}")
    elif subcmd == "transaction":
        when = _parse_full_date(args.date)
        with open_snapshot(cfg) as snapshot:
            account_id = snapshot.resolve_account_id(args.account)
            category_id = snapshot.resolve_category_id(args.category)
        transaction = insert_transaction(
            cfg, when, account_id, category_id, args.description, args.value
        )
        print(
            f"Added transaction #{transaction.id} on {transaction.date.isoformat()}: "
            f"{transaction.value:.2f}"
        )
    elif subcmd == "budget":
        parsed = parse_date_string(args.period)
        if parsed.granularity != DateGranularity.MONTH:
            raise InvalidDate(args.period, "YYYY-MM")
        with open_snapshot(cfg) as snapshot:
            category_id = snapshot.resolve_category_id(args.category)
        budget = insert_budget(
            cfg, parsed.year, parsed.month, category_id, args.value, args.currency
        )
        print(
            f"Budget {budget.year:04d}-{budget.month:02d} for category "
            f"#{budget.category_id}: {budget.value:.2f} {budget.currency}"
        )
    elif subcmd == "rate":
        rate = set_exchange_rate(cfg, args.currency_from, args.currency_to, args.rate)
        print(f"1 {rate.currency_from} = {rate.rate:.4f} {rate.currency_to}")
    else:
        print(
            "No item kind specified. Available kinds are: "
            "'account', 'main-category', 'category', 'transaction', 'budget', "
            "'rate'."
        )


def _compute_report(args: argparse.Namespace, config: AppConfig, snapshot):
    kind = args.report_kind
    default_currency = config.default_currency

    if kind == "accounts":
        return accounts_balance(snapshot, args.date)
    if kind == "assets":
        return assets_summary(
            snapshot, args.currency, args.date, default_currency=default_currency
        )
    if kind == "transactions":
        return transactions_balance(
            snapshot,
            args.currency,
            args.date,
            account=args.account,
            category=args.category,
            main_category=args.main_category,
            main_category_type=args.main_category_type,
            account_currency=args.account_currency,
            default_currency=default_currency,
        )
    if kind == "categories":
        return categories_balance(
            snapshot, args.currency, args.date, default_currency=default_currency
        )
    if kind == "main-categories":
        return main_categories_balance(
            snapshot, args.currency, args.date, default_currency=default_currency
        )
    if kind == "budget":
        return budget_categories(
            snapshot, args.currency, args.period, default_currency=default_currency
        )
    if kind == "budget-main":
        return budget_main_categories(
            snapshot, args.currency, args.period, default_currency=default_currency
        )
    if kind == "net-value":
        return net_value(
            snapshot, args.currency, args.date, default_currency=default_currency
        )
    raise ValueError(f"Unknown report kind: {kind!r}")


def _handle_report(args: argparse.Namespace, config: AppConfig) -> None:
    if getattr(args, "report_kind", None) is None:
        print(
            "No report kind specified. Available kinds are: 'accounts', "
            "'assets', 'transactions', 'categories', 'main-categories', "
            "'budget', 'budget-main', 'net-value'."
        )
        return

    with open_snapshot(config.database) as snapshot:
        report = _compute_report(args, config, snapshot)
    _print_lines(render_report(report, emphasis=config.display.emphasis))


def _handle_rates(args: argparse.Namespace, config: AppConfig) -> None:
    with open_snapshot(config.database) as snapshot:
        rates = snapshot.list_all_exchange_rates()
    if rates.empty:
        print("No exchange rates stored.")
        return
    _print_lines(render_exchange_rates(rates))


_CLOSERS = {
    "account": (close_account, "resolve_account_id"),
    "main-category": (close_main_category, "resolve_main_category_id"),
    "category": (close_category, "resolve_category_id"),
}


def _handle_close(args: argparse.Namespace, config: AppConfig) -> None:
    kind = getattr(args, "close_command", None)
    if kind is None:
        print(
            "No item kind specified. Available kinds are: "
            "'account', 'main-category', 'category'."
        )
        return

    close, resolver = _CLOSERS[kind]
    item_id = args.item_id
    if item_id is None:
        with open_snapshot(config.database) as snapshot:
            item_id = getattr(snapshot, resolver)(args.name)
    close(config.database, item_id)
    print(f"Closed {kind.replace('-', ' ')} #{item_id}.")


def _handle_list(args: argparse.Namespace, config: AppConfig) -> None:
    """Dispatch function for the 'list' subcommands."""
    kind = getattr(args, "list_kind", None)
    if kind is None:
        print(
            "No item kind specified. Available kinds are: "
            "'accounts', 'main-categories', 'categories'."
        )
        return

    status = None if args.all else ItemStatus.OPEN
    with open_snapshot(config.database) as snapshot:
        if kind == "accounts":
            items = snapshot.list_accounts(
                AccountFilter(
                    name_contains=args.name,
                    type=args.account_type,
                    currency=args.currency.upper() if args.currency else None,
                    institution_contains=args.institution,
                    status=status,
                )
            )
            render = render_account_list
        elif kind == "main-categories":
            items = snapshot.list_main_categories(
                MainCategoryFilter(
                    name_contains=args.name,
                    type=args.main_category_type,
                    status=status,
                )
            )
            render = render_main_category_list
        else:
            items = snapshot.list_categories(
                CategoryFilter(
                    name_contains=args.name,
                    main_category_contains=args.main_category,
                    main_category_type=args.main_category_type,
                    status=status,
                )
            )
            render = render_category_list

    if items.empty:
        print(f"No {kind.replace('-', ' ')} found.")
        return
    _print_lines(render(items))


_HANDLERS = {
    "init": _handle_init,
    "add": _handle_add,
    "report": _handle_report,
    "close": _handle_close,
    "list": _handle_list,
    "rates": _handle_rates,
}


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the MM Ledger CLI.

    Parses command-line arguments, loads the configuration and runs the
    selected command. Errors raised by the ledger are reported on stderr
    with exit status 1.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"mm_ledger version {__version__}")
        return

    if args.command is None:
        parser.error("a command is required (init, add, close, list, report or rates).")

    _configure_logging(args.verbose)

    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"{PROG}: {exc}") from exc

    try:
        _HANDLERS[args.command](args, config)
    except LedgerError as exc:
        logger.debug("Command failed", exc_info=True)
        raise SystemExit(f"{PROG}: {exc}") from exc
    except (ValueError, sqlite3.Error) as exc:
        # Rejected by the write path (unknown category, bad currency...).
        raise SystemExit(f"{PROG}: {exc}") from exc


if __name__ == "__main__":
    main()
