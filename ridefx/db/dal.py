"""Data Access Layer for currency settings and exchange rates.

Responsibilities
----------------
- Read enabled / featured currency rows in display order.
- Read the latest base-relative exchange rates and their fetch timestamps.
- Apply admin mutations (enable, feature, default) and rate upserts.

Read helpers raise ``sqlite3.Error`` on storage failure; the rate store turns
those into fallback values, so nothing here swallows errors.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import sqlite3
from typing import Any, Dict, List, Optional

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"
_UNSET = object()


def to_iso_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def parse_iso_utc(value: str) -> datetime:
    """Parse stored timestamps ('...Z', '+00:00' or naive) as aware UTC datetimes."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Currency settings (reads)
    def list_currencies(
        self, enabled_only: bool = False, featured_only: bool = False
    ) -> List[Dict[str, Any]]:
        clauses: List[str] = []
        if enabled_only or featured_only:
            clauses.append("is_enabled = 1")
        if featured_only:
            clauses.append("is_featured = 1")
        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        sql = (
            f"SELECT * FROM currency_settings{where} "
            "ORDER BY display_order ASC, currency_code ASC"
        )
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(sql)
            return [dict(r) for r in cur.fetchall()]

    def get_currency(self, code: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM currency_settings WHERE currency_code = ?",
                (code.upper(),),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def get_default_currency_code(self) -> Optional[str]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT currency_code FROM currency_settings WHERE is_default = 1 LIMIT 1"
            )
            row = cur.fetchone()
            return row[0] if row else None

    # ------------------------------------------------------------------
    # Currency settings (writes)
    def update_currency_flags(
        self,
        code: str,
        is_enabled: Any = _UNSET,
        is_featured: Any = _UNSET,
    ) -> bool:
        """Update enablement / featured flags; returns False when the code is unknown."""
        sets: List[str] = []
        params: List[Any] = []
        if is_enabled is not _UNSET:
            sets.append("is_enabled = ?")
            params.append(int(bool(is_enabled)))
        if is_featured is not _UNSET:
            sets.append("is_featured = ?")
            params.append(int(bool(is_featured)))
        if not sets:
            return self.get_currency(code) is not None
        sets.append(f"updated_at = ({UTC_NOW_SQL})")
        params.append(code.upper())
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE currency_settings SET {', '.join(sets)} WHERE currency_code = ?",
                params,
            )
            conn.commit()
            return cur.rowcount > 0

    def update_display_order(self, code: str, display_order: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE currency_settings SET display_order = ?, updated_at = ({UTC_NOW_SQL}) "
                "WHERE currency_code = ?",
                (display_order, code.upper()),
            )
            conn.commit()
            return cur.rowcount > 0

    def set_default_currency(self, code: str) -> bool:
        """Make ``code`` the single default currency in one transaction."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT 1 FROM currency_settings WHERE currency_code = ?", (code.upper(),)
            )
            if cur.fetchone() is None:
                return False
            cur.execute(
                f"UPDATE currency_settings SET is_default = 0, updated_at = ({UTC_NOW_SQL}) "
                "WHERE is_default = 1 AND currency_code != ?",
                (code.upper(),),
            )
            cur.execute(
                f"UPDATE currency_settings SET is_default = 1, updated_at = ({UTC_NOW_SQL}) "
                "WHERE currency_code = ?",
                (code.upper(),),
            )
            conn.commit()
            return True

    # ------------------------------------------------------------------
    # Exchange rates
    def list_exchange_rates(self, base_currency: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT base_currency, target_currency, rate, fetched_at
                FROM exchange_rates
                WHERE base_currency = ?
                ORDER BY target_currency ASC
                """,
                (base_currency,),
            )
            return [dict(r) for r in cur.fetchall()]

    def latest_rate_fetched_at(self, base_currency: str) -> Optional[datetime]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT fetched_at FROM exchange_rates
                WHERE base_currency = ?
                ORDER BY fetched_at DESC
                LIMIT 1
                """,
                (base_currency,),
            )
            row = cur.fetchone()
            return parse_iso_utc(row[0]) if row else None

    def upsert_exchange_rate(
        self,
        base_currency: str,
        target_currency: str,
        rate: float,
        fetched_at: datetime,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO exchange_rates (base_currency, target_currency, rate, fetched_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(base_currency, target_currency) DO UPDATE SET
                    rate = excluded.rate,
                    fetched_at = excluded.fetched_at
                """,
                (base_currency, target_currency, float(rate), to_iso_utc(fetched_at)),
            )
            conn.commit()
