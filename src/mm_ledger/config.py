# MM Ledger - Personal finance ledger & reporting
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for MM Ledger.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing typed dataclasses used by the CLI and the report layer.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .db import DatabaseConfig

DEFAULT_CONFIG_FILENAME = "mm_ledger_config.toml"
DEFAULT_DB_PATH = "data/mm_ledger.sqlite"


@dataclass(frozen=True)
class DisplayConfig:
    """
    Display options for the text reports.

    Attributes
    ----------
    emphasis:
        Wrap subtotal and total lines in ANSI bold sequences.
    """

    emphasis: bool = True


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for MM Ledger.

    This aggregates:
    - the database configuration (where the ledger is stored),
    - the default reporting currency used when a report gets none,
    - display options.
    """

    database: DatabaseConfig
    default_currency: Optional[str] = None
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def with_database_path(self, path: Path) -> "AppConfig":
        """Return a copy pointing to another ledger file."""
        return replace(
            self,
            database=DatabaseConfig(engine=self.database.engine, path=path.resolve()),
        )


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config entry [{name}] must be a table.")
    return section


def _parse_currency(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(
            "Invalid value for 'reporting.default_currency'. Expected a string."
        )
    return value.strip().upper() or None


def default_app_config(base_dir: Optional[Path] = None) -> AppConfig:
    """Configuration used when no TOML file is available."""
    base = (base_dir or Path.cwd()).resolve()
    return AppConfig(
        database=DatabaseConfig(engine="sqlite", path=(base / DEFAULT_DB_PATH).resolve())
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the MM Ledger configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        ``engine`` (only "sqlite") and ``path`` of the ledger file.

    [reporting]
        ``default_currency``: reporting currency used when a report is
        requested without one.

    [display]
        ``emphasis``: bold subtotal/total lines (default true).

    All file paths in the TOML are resolved relative to the directory of
    the TOML file itself.

    Parameters
    ----------
    config_path:
        Path to the TOML file. Defaults to ``mm_ledger_config.toml`` in the
        current working directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILENAME).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    db_path = (base_dir / str(db_path_raw)).resolve()

    # 2) Reporting section
    reporting_section = _section(raw, "reporting")
    default_currency = _parse_currency(reporting_section.get("default_currency"))

    # 3) Display options
    display_section = _section(raw, "display")
    emphasis_raw = display_section.get("emphasis", True)
    if not isinstance(emphasis_raw, bool):
        raise ValueError(
            "Invalid value for 'display.emphasis' in the configuration. "
            "Expected true or false."
        )

    return AppConfig(
        database=DatabaseConfig(engine=db_engine, path=db_path),
        default_currency=default_currency,
        display=DisplayConfig(emphasis=emphasis_raw),
    )
