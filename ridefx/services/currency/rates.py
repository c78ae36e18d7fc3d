"""Cached read access to exchange rates and currency settings.

Every read goes through a `TTLCache` under a fixed key. Storage failures and
empty results never propagate: they are logged and replaced by the hard-coded
fallback tables below, which are cached for a shorter window so a recovered
database shows up quickly.

Readers within one cache window share a value; invalidation (after admin
changes or a rate refresh) simply drops the entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Any, Dict, Generic, List, Optional, Protocol, TypeVar

from ridefx.core.config import Settings, get_settings
from ridefx.models.constants import BASE_CURRENCY, DEFAULT_CURRENCY_CODE
from ridefx.models.currency import CurrencyInfo
from ridefx.services.cache import TTLCache

logger = logging.getLogger("ridefx.rates")

RATES_CACHE_KEY = "exchange-rates"
ENABLED_CACHE_KEY = "enabled-currencies"
FEATURED_CACHE_KEY = "featured-currencies"
DEFAULT_CACHE_KEY = "default-currency"
CURRENCY_CACHE_KEYS = (ENABLED_CACHE_KEY, FEATURED_CACHE_KEY, DEFAULT_CACHE_KEY)

# AED -> target, used when the rates table is unreachable or empty
FALLBACK_RATES: Dict[str, float] = {
    "AED": 1.0,
    "USD": 0.27,
    "EUR": 0.25,
    "GBP": 0.22,
    "AUD": 0.41,
    "CAD": 0.37,
    "CHF": 0.24,
    "SAR": 1.02,
    "SGD": 0.37,
    "INR": 22.65,
    "JPY": 40.74,
}


def fallback_currencies() -> List[CurrencyInfo]:
    return [
        CurrencyInfo(code="AED", name="UAE Dirham", symbol="د.إ", is_default=True, is_featured=True, display_order=0),
        CurrencyInfo(code="USD", name="US Dollar", symbol="$", is_featured=True, display_order=1),
        CurrencyInfo(code="EUR", name="Euro", symbol="€", is_featured=True, display_order=2),
        CurrencyInfo(code="GBP", name="British Pound", symbol="£", is_featured=True, display_order=3),
    ]


T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    value: T
    used_fallback: bool = False


class CurrencyDataSource(Protocol):
    """Read contract the rate store needs from persistence (see `ridefx.db.dal.Database`)."""

    def list_exchange_rates(self, base_currency: str) -> List[Dict[str, Any]]: ...

    def latest_rate_fetched_at(self, base_currency: str) -> Optional[datetime]: ...

    def list_currencies(
        self, enabled_only: bool = False, featured_only: bool = False
    ) -> List[Dict[str, Any]]: ...

    def get_default_currency_code(self) -> Optional[str]: ...


class RateStore:
    """Cached accessor for rates and enabled currencies.

    Public methods never raise on storage failure; the ``fetch_*`` variants
    additionally report whether a fallback table was used.
    """

    def __init__(
        self,
        source: CurrencyDataSource,
        cache: Optional[TTLCache] = None,
        settings: Optional[Settings] = None,
    ):
        self._source = source
        self._cache = cache or TTLCache()
        s = settings or get_settings()
        self._rates_ttl = s.rates_cache_ttl_seconds
        self._currencies_ttl = s.currencies_cache_ttl_seconds
        self._fallback_ttl = s.fallback_cache_ttl_seconds
        self._stale_after = timedelta(hours=s.rates_stale_after_hours)

    @property
    def cache(self) -> TTLCache:
        return self._cache

    def _ttl_for(self, normal_ttl: int):
        def ttl(result: FetchResult) -> int:
            return self._fallback_ttl if result.used_fallback else normal_ttl

        return ttl

    # ------------------------------------------------------------------
    # Exchange rates
    def _load_rates(self) -> FetchResult[Dict[str, float]]:
        try:
            rows = self._source.list_exchange_rates(BASE_CURRENCY)
        except Exception:
            logger.exception("error fetching exchange rates, using fallback table")
            return FetchResult(dict(FALLBACK_RATES), used_fallback=True)
        if not rows:
            logger.warning("no exchange rates stored, using fallback table")
            return FetchResult(dict(FALLBACK_RATES), used_fallback=True)
        rates: Dict[str, float] = {}
        for row in rows:
            try:
                rates[row["target_currency"]] = float(row["rate"])
            except (KeyError, TypeError, ValueError):
                logger.warning("skipping malformed rate row %r", row)
        rates[BASE_CURRENCY] = 1.0
        return FetchResult(rates)

    def fetch_rates(self) -> FetchResult[Dict[str, float]]:
        return self._cache.get_or_set(
            RATES_CACHE_KEY, self._load_rates, self._ttl_for(self._rates_ttl)
        )

    def get_rates(self) -> Dict[str, float]:
        # Copy so callers cannot mutate the shared cached mapping
        return dict(self.fetch_rates().value)

    def get_last_rate_update(self) -> Optional[datetime]:
        try:
            return self._source.latest_rate_fetched_at(BASE_CURRENCY)
        except Exception:
            logger.exception("error reading last rate update")
            return None

    def is_stale(self) -> bool:
        last = self.get_last_rate_update()
        if last is None:
            return True
        return self._cache.now() - last > self._stale_after

    def invalidate_rates(self) -> None:
        self._cache.delete(RATES_CACHE_KEY)

    def status(self) -> Dict[str, Any]:
        """Snapshot for the admin rates panel."""
        result = self.fetch_rates()
        last = self.get_last_rate_update()
        return {
            "last_updated": last.isoformat() if last else None,
            "is_stale": self.is_stale(),
            "rate_count": len(result.value),
            "rates": dict(result.value),
            "used_fallback": result.used_fallback,
        }

    # ------------------------------------------------------------------
    # Currencies
    def _load_currencies(self, featured_only: bool) -> FetchResult[List[CurrencyInfo]]:
        try:
            rows = self._source.list_currencies(enabled_only=True, featured_only=featured_only)
            currencies = [CurrencyInfo.from_row(r) for r in rows]
        except Exception:
            logger.exception("error fetching enabled currencies, using fallback list")
            return FetchResult(fallback_currencies(), used_fallback=True)
        if not currencies:
            logger.warning("no enabled currencies found, using fallback list")
            return FetchResult(fallback_currencies(), used_fallback=True)
        return FetchResult(currencies)

    def fetch_enabled_currencies(self) -> FetchResult[List[CurrencyInfo]]:
        return self._cache.get_or_set(
            ENABLED_CACHE_KEY,
            lambda: self._load_currencies(featured_only=False),
            self._ttl_for(self._currencies_ttl),
        )

    def fetch_featured_currencies(self) -> FetchResult[List[CurrencyInfo]]:
        return self._cache.get_or_set(
            FEATURED_CACHE_KEY,
            lambda: self._load_currencies(featured_only=True),
            self._ttl_for(self._currencies_ttl),
        )

    def get_enabled_currencies(self) -> List[CurrencyInfo]:
        return list(self.fetch_enabled_currencies().value)

    def get_featured_currencies(self) -> List[CurrencyInfo]:
        return list(self.fetch_featured_currencies().value)

    def get_enabled_currency_codes(self) -> List[str]:
        return [c.code for c in self.fetch_enabled_currencies().value]

    def _load_default(self) -> FetchResult[str]:
        try:
            code = self._source.get_default_currency_code()
        except Exception:
            logger.exception("error reading default currency")
            return FetchResult(DEFAULT_CURRENCY_CODE, used_fallback=True)
        if not code:
            return FetchResult(DEFAULT_CURRENCY_CODE, used_fallback=True)
        return FetchResult(code)

    def fetch_default_currency(self) -> FetchResult[str]:
        return self._cache.get_or_set(
            DEFAULT_CACHE_KEY, self._load_default, self._ttl_for(self._currencies_ttl)
        )

    def get_default_currency(self) -> str:
        return self.fetch_default_currency().value

    def is_currency_enabled(self, code: str) -> bool:
        return any(c.code == code for c in self.fetch_enabled_currencies().value)

    def get_currency_info(self, code: str) -> Optional[CurrencyInfo]:
        for c in self.fetch_enabled_currencies().value:
            if c.code == code:
                return c
        return None

    def invalidate_currencies(self) -> None:
        self._cache.delete(*CURRENCY_CACHE_KEYS)
