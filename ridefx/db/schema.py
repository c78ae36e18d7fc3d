"""Database schema DDL definitions and initialization utilities.

Tables:
  - currency_settings: one row per supported tender (enablement, default, ordering)
  - exchange_rates: latest rate per (base, target) pair with fetch timestamp
  - metadata: key/value store (schema version etc.)

Writes to the first two tables come from the admin settings service and the
rate refresh job; the rate store only reads them.
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

CURRENCY_SETTINGS_DDL = f"""
CREATE TABLE IF NOT EXISTS currency_settings (
    currency_code TEXT PRIMARY KEY CHECK (length(currency_code) = 3),
    name TEXT NOT NULL,
    symbol TEXT NOT NULL,
    decimal_places INTEGER NOT NULL DEFAULT 2 CHECK (decimal_places >= 0),
    symbol_position TEXT NOT NULL DEFAULT 'before' CHECK (symbol_position IN ('before','after')),
    is_enabled INTEGER NOT NULL DEFAULT 0,
    is_default INTEGER NOT NULL DEFAULT 0,
    is_featured INTEGER NOT NULL DEFAULT 0,
    display_order INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXCHANGE_RATES_DDL = """
CREATE TABLE IF NOT EXISTS exchange_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    base_currency TEXT NOT NULL, -- 'AED'
    target_currency TEXT NOT NULL,
    rate REAL NOT NULL CHECK (rate > 0),
    fetched_at TEXT NOT NULL, -- ISO timestamp (UTC)
    UNIQUE(base_currency, target_currency)
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

# At most one default currency
SINGLE_DEFAULT_INDEX_DDL = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_currency_single_default
ON currency_settings(is_default)
WHERE is_default = 1;
"""
CURRENCY_ORDER_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_currency_enabled_order "
    "ON currency_settings(is_enabled, display_order);"
)
RATES_FETCHED_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_rates_base_fetched "
    "ON exchange_rates(base_currency, fetched_at);"
)

DDL_ORDER: Sequence[str] = (
    CURRENCY_SETTINGS_DDL,
    EXCHANGE_RATES_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    for ddl in (
        SINGLE_DEFAULT_INDEX_DDL,
        CURRENCY_ORDER_INDEX_DDL,
        RATES_FETCHED_INDEX_DDL,
    ):
        cur.execute(ddl)
