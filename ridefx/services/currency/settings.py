"""Admin mutations on currency settings.

Rules enforced here (the database only guarantees a single default row):
  - the default currency cannot be disabled;
  - disabling a currency also removes it from the featured list;
  - only enabled currencies can be featured or made default.

Violations raise ``ValueError``; unknown codes raise ``LookupError``. Every
successful change drops the cached currency reads so they show up at once.
"""

from __future__ import annotations
import logging
from typing import List, Optional

from ridefx.db.dal import Database
from ridefx.models.currency import CurrencySetting
from .rates import RateStore

logger = logging.getLogger("ridefx.currency_settings")


def _require(db: Database, code: str) -> dict:
    row = db.get_currency(code)
    if row is None:
        raise LookupError(f"Unknown currency {code.upper()}")
    return row


def _invalidate(store: Optional[RateStore]) -> None:
    if store is not None:
        store.invalidate_currencies()


def list_all_currencies(db: Database) -> List[CurrencySetting]:
    return [CurrencySetting.from_row(r) for r in db.list_currencies()]


def toggle_currency_enabled(
    db: Database, code: str, is_enabled: bool, store: Optional[RateStore] = None
) -> CurrencySetting:
    row = _require(db, code)
    if not is_enabled and row["is_default"]:
        raise ValueError("Cannot disable the default currency")
    if is_enabled:
        db.update_currency_flags(code, is_enabled=True)
    else:
        db.update_currency_flags(code, is_enabled=False, is_featured=False)
    logger.info("currency %s enabled=%s", code.upper(), is_enabled)
    _invalidate(store)
    return CurrencySetting.from_row(_require(db, code))


def toggle_currency_featured(
    db: Database, code: str, is_featured: bool, store: Optional[RateStore] = None
) -> CurrencySetting:
    row = _require(db, code)
    if is_featured and not row["is_enabled"]:
        raise ValueError("Currency must be enabled before featuring")
    db.update_currency_flags(code, is_featured=is_featured)
    logger.info("currency %s featured=%s", code.upper(), is_featured)
    _invalidate(store)
    return CurrencySetting.from_row(_require(db, code))


def set_default_currency(
    db: Database, code: str, store: Optional[RateStore] = None
) -> CurrencySetting:
    row = _require(db, code)
    if not row["is_enabled"]:
        raise ValueError("Currency must be enabled before setting as default")
    db.set_default_currency(code)
    logger.info("default currency set to %s", code.upper())
    _invalidate(store)
    return CurrencySetting.from_row(_require(db, code))


def update_currency_order(
    db: Database, code: str, display_order: int, store: Optional[RateStore] = None
) -> CurrencySetting:
    _require(db, code)
    if display_order < 0:
        raise ValueError("display_order must be >= 0")
    db.update_display_order(code, display_order)
    _invalidate(store)
    return CurrencySetting.from_row(_require(db, code))
