"""Seeding helpers for the currency settings table.

`seed_currencies` ensures every currency from the static metadata table has a
settings row. The base currency is enabled, featured and default; a handful of
majors are enabled and featured; everything else starts disabled. Existing rows
are left untouched (admin controlled) so this can be safely re-run.
"""

from __future__ import annotations
from pathlib import Path
import sqlite3
from typing import Iterable

from ridefx.models.constants import BASE_CURRENCY
from ridefx.services.currency.metadata import CURRENCY_METADATA
from .schema import init_db

DEFAULT_ENABLED = ("AED", "USD", "EUR", "GBP")


def seed_currencies(db_path: Path, enabled: Iterable[str] = DEFAULT_ENABLED) -> int:
    """Insert missing currency rows; return how many were added."""
    init_db(db_path)  # ensure tables exist
    enabled_set = set(enabled)
    added = 0
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM currency_settings WHERE is_default = 1")
        has_default = cur.fetchone()[0] > 0
        for order, (code, meta) in enumerate(CURRENCY_METADATA.items()):
            is_enabled = code in enabled_set
            is_default = code == BASE_CURRENCY and not has_default
            cur.execute(
                """
                INSERT OR IGNORE INTO currency_settings
                    (currency_code, name, symbol, decimal_places, symbol_position,
                     is_enabled, is_default, is_featured, display_order)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    code,
                    meta.name,
                    meta.symbol,
                    meta.decimal_places,
                    meta.symbol_position,
                    int(is_enabled),
                    int(is_default),
                    int(is_enabled),
                    order,
                ),
            )
            added += cur.rowcount
        conn.commit()
    return added
