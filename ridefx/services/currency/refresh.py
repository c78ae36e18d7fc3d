"""Exchange-rate refresh job (Hexarate, base AED).

Fetches one ``AED -> target`` mid rate per enabled currency, concurrently, and
upserts them into ``exchange_rates``. The run is rejected when fewer than half
of the pairs come back. When the API is unusable the previously stored rates
are reported instead, so callers always learn which data is live.

Runs from the admin ``POST /rates/refresh`` endpoint or from a scheduler via
``python -m ridefx.services.currency.refresh``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
import logging
import sqlite3
from typing import Dict, List, Optional, Sequence

from ridefx.core.config import Settings, get_settings
from ridefx.db.dal import Database
from ridefx.models.constants import BASE_CURRENCY
from ridefx.services.cache import Clock, utc_now
from ridefx.services.http_client import HttpError, get_json
from .rates import RateStore

logger = logging.getLogger("ridefx.refresh")

FALLBACK_CURRENCY_CODES = ("AED", "USD", "EUR", "GBP")

SOURCE_API = "api"
SOURCE_CACHE = "cache"
SOURCE_FALLBACK = "fallback"


class RateClient(ABC):
    @abstractmethod
    def get_rate(self, base: str, target: str) -> float:
        """Return units of ``target`` per 1 ``base``; raise HttpError on failure."""
        raise NotImplementedError


class HexarateClient(RateClient):
    """Hexarate (hexarate.paikama.co): free, keyless, supports AED as base."""

    def __init__(self, base_url: str, timeout: float = 5.0, retries: int = 2):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries

    def get_rate(self, base: str, target: str) -> float:
        url = f"{self.base_url}/{base}/{target}/latest"
        payload = get_json(url, timeout=self.timeout, retries=self.retries)
        data = payload.get("data") or {}
        mid = data.get("mid")
        if payload.get("status_code") != 200 or not isinstance(mid, (int, float)) or mid <= 0:
            raise HttpError(f"Invalid response for {target}: status {payload.get('status_code')}")
        return float(mid)


def make_rate_client(settings: Optional[Settings] = None) -> RateClient:
    s = settings or get_settings()
    return HexarateClient(
        s.rates_api_base_url, timeout=s.http_timeout_seconds, retries=s.http_retries
    )


@dataclass
class RefreshResult:
    success: bool
    message: str
    source: str  # 'api' | 'cache' | 'fallback'
    rates: Dict[str, float] = field(default_factory=dict)
    last_updated: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


async def _fetch_one(client: RateClient, target: str) -> tuple[str, float]:
    rate = await asyncio.to_thread(client.get_rate, BASE_CURRENCY, target)
    return target, rate


async def fetch_rates_from_api(
    client: RateClient, currencies: Sequence[str]
) -> Optional[Dict[str, float]]:
    """Fetch every non-base rate concurrently; None when too many fail."""
    targets = [c for c in currencies if c != BASE_CURRENCY]
    logger.info("fetching %d rates (base %s)", len(targets), BASE_CURRENCY)
    results = await asyncio.gather(
        *(_fetch_one(client, t) for t in targets), return_exceptions=True
    )
    rates: Dict[str, float] = {BASE_CURRENCY: 1.0}
    failed = 0
    for target, result in zip(targets, results):
        if isinstance(result, BaseException):
            logger.warning("rate fetch failed for %s: %s", target, result)
            failed += 1
            continue
        code, rate = result
        rates[code] = rate
    succeeded = len(targets) - failed
    logger.info("fetched %d/%d rates (%d failed)", succeeded, len(targets), failed)
    if succeeded < len(targets) / 2:
        logger.error("too many rate fetch failures, aborting refresh")
        return None
    return rates


def _enabled_codes(db: Database) -> List[str]:
    try:
        codes = [r["currency_code"] for r in db.list_currencies(enabled_only=True)]
    except sqlite3.Error:
        logger.exception("error reading enabled currencies")
        codes = []
    return codes or list(FALLBACK_CURRENCY_CODES)


def _stored_rates(db: Database) -> Dict[str, float]:
    try:
        rows = db.list_exchange_rates(BASE_CURRENCY)
    except sqlite3.Error:
        logger.exception("error reading stored rates")
        return {}
    return {r["target_currency"]: float(r["rate"]) for r in rows}


def _last_fetch(db: Database) -> Optional[datetime]:
    try:
        return db.latest_rate_fetched_at(BASE_CURRENCY)
    except sqlite3.Error:
        logger.exception("error reading last rate fetch time")
        return None


def _store_rates(
    db: Database, rates: Dict[str, float], currencies: Sequence[str], fetched_at: datetime
) -> tuple[int, int]:
    updated = failed = 0
    for code in currencies:
        # Pairs the API skipped are stored at 1.0
        rate = rates.get(code) or 1.0
        try:
            db.upsert_exchange_rate(BASE_CURRENCY, code, rate, fetched_at)
        except (sqlite3.Error, ValueError):
            logger.exception("failed to store rate for %s", code)
            failed += 1
        else:
            updated += 1
    logger.info("rate store complete: %d updated, %d failed", updated, failed)
    return updated, failed


async def refresh_exchange_rates(
    db: Database,
    client: RateClient,
    store: Optional[RateStore] = None,
    force: bool = False,
    stale_after_hours: int = 24,
    clock: Clock = utc_now,
) -> RefreshResult:
    """Refresh stored rates when stale (or forced) and report where they came from."""
    now = clock()
    last = _last_fetch(db)
    stale = last is None or now - last > timedelta(hours=stale_after_hours)
    logger.info(
        "rate refresh start (force=%s, last=%s, stale=%s)",
        force,
        last.isoformat() if last else "never",
        stale,
    )
    currencies = _enabled_codes(db)

    if not force and not stale and last is not None:
        return RefreshResult(
            success=True,
            message="Rates are up to date",
            source=SOURCE_CACHE,
            rates=_stored_rates(db),
            last_updated=last.isoformat(),
        )

    api_rates = await fetch_rates_from_api(client, currencies)
    if api_rates:
        updated, _ = _store_rates(db, api_rates, currencies, now)
        if updated > 0:
            if store is not None:
                store.invalidate_rates()
            return RefreshResult(
                success=True,
                message=f"Successfully updated {updated} exchange rates",
                source=SOURCE_API,
                rates=api_rates,
                last_updated=now.isoformat(),
            )
        logger.error("all rate updates failed")

    logger.warning("rate API unavailable, falling back to stored rates")
    stored = _stored_rates(db)
    if stored:
        return RefreshResult(
            success=True,
            message="Using cached rates (API unavailable)",
            source=SOURCE_FALLBACK,
            rates=stored,
            last_updated=last.isoformat() if last else None,
        )
    return RefreshResult(
        success=False,
        message="Failed to fetch exchange rates and no cache available",
        source=SOURCE_FALLBACK,
    )


def main() -> None:  # pragma: no cover - scheduler entry point
    from ridefx.core.logging import init_logging
    from ridefx.db.migrate import apply_migrations

    settings = get_settings()
    init_logging(settings.debug)
    apply_migrations(settings.db_path)
    db = Database(settings.db_path)
    result = asyncio.run(
        refresh_exchange_rates(
            db,
            make_rate_client(settings),
            stale_after_hours=settings.rates_stale_after_hours,
        )
    )
    logger.info("rate refresh finished: %s (%s)", result.message, result.source)
    raise SystemExit(0 if result.success else 1)


if __name__ == "__main__":  # pragma: no cover
    main()
