"""Time-bounded key/value cache used for read-through memoisation.

Entries are (value, expires_at) pairs keyed by a fixed string. Readers inside
the window share the stored value; a refresh simply overwrites the entry
(last writer wins, recomputation has no side effects). The clock is injectable
so expiry can be exercised without sleeping.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _CacheEntry:
    value: Any
    expires_at: datetime


_MISSING = object()


class TTLCache:
    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or utc_now
        self._entries: Dict[str, _CacheEntry] = {}

    def now(self) -> datetime:
        return self._clock()

    def _is_valid(self, entry: _CacheEntry) -> bool:
        return self._clock() < entry.expires_at

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if not self._is_valid(entry):
            self._entries.pop(key, None)
            return default
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl must be positive seconds")
        self._entries[key] = _CacheEntry(
            value=value, expires_at=self._clock() + timedelta(seconds=ttl_seconds)
        )

    def get_or_set(
        self,
        key: str,
        loader: Callable[[], Any],
        ttl_seconds: float | Callable[[Any], float],
    ) -> Any:
        """Return the cached value or compute, store and return it.

        ``ttl_seconds`` may be a callable receiving the loaded value, so callers
        can pick a shorter lifetime for degraded results.
        """
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            return cached
        value = loader()
        ttl = ttl_seconds(value) if callable(ttl_seconds) else ttl_seconds
        self.set(key, value, ttl)
        return value

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)
