"""
Response Cache - TTL-keyed store fronting idempotent read operations.

============================================================
RESPONSIBILITY
============================================================
Avoid redundant network work for read-mostly, short-lived data.

- Per resource-class TTL (price 30s, token metadata 1h, portfolio 5m)
- Entries are replaced, never mutated in place
- Lazy expiry on read plus optional periodic sweep
- A failing store degrades to "always miss", never to an error

============================================================
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from oneinch_sdk.clock import ClockProtocol, SystemClock


logger = logging.getLogger(__name__)


# ============================================================
# RESOURCE CLASSES & TTL POLICY
# ============================================================

class ResourceClass(Enum):
    """Category of cacheable data, used to select a TTL."""
    PRICE = "price"
    TOKEN_METADATA = "token_metadata"
    PORTFOLIO = "portfolio"


DEFAULT_TTL_SECONDS: dict[ResourceClass, float] = {
    ResourceClass.PRICE: 30.0,
    ResourceClass.TOKEN_METADATA: 3600.0,
    ResourceClass.PORTFOLIO: 300.0,
}

DEFAULT_FALLBACK_TTL_SECONDS = 60.0


class TTLPolicy:
    """Resource class -> time-to-live in seconds."""

    def __init__(
        self,
        ttls: Optional[dict[ResourceClass, float]] = None,
        default_ttl: float = DEFAULT_FALLBACK_TTL_SECONDS,
    ) -> None:
        self._ttls = dict(DEFAULT_TTL_SECONDS)
        if ttls:
            self._ttls.update(ttls)
        self._default_ttl = default_ttl

    def ttl_for(self, resource_class: Optional[ResourceClass]) -> float:
        if resource_class is None:
            return self._default_ttl
        return self._ttls.get(resource_class, self._default_ttl)

    def with_overrides(self, **ttls: float) -> "TTLPolicy":
        """Copy of this policy with TTLs overridden by resource class name."""
        merged = dict(self._ttls)
        for name, ttl in ttls.items():
            merged[ResourceClass(name)] = ttl
        return TTLPolicy(merged, self._default_ttl)

    def as_dict(self) -> dict[str, float]:
        return {rc.value: ttl for rc, ttl in self._ttls.items()}


# ============================================================
# CACHE ENTRY
# ============================================================

@dataclass(frozen=True)
class CacheEntry:
    """One cached value."""
    key: str
    value: Any
    stored_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.stored_at + self.ttl

    def is_expired(self, now: float) -> bool:
        """A read strictly after `stored_at + ttl` is a miss."""
        return now > self.expires_at

    def age_seconds(self, now: float) -> float:
        return now - self.stored_at


@dataclass
class CacheStats:
    """Counters for cache observability."""
    hits: int = 0
    misses: int = 0
    expirations: int = 0
    writes: int = 0
    errors: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "writes": self.writes,
            "errors": self.errors,
            "size": self.size,
            "hit_rate": round(self.hit_rate, 4),
        }


# ============================================================
# STORAGE
# ============================================================

class CacheStore(ABC):
    """Backing storage for cache entries."""

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        pass

    @abstractmethod
    def put(self, entry: CacheEntry) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def entries(self) -> list[CacheEntry]:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self.entries())


class InMemoryCacheStore(CacheStore):
    """Process-local store. Last write wins per key."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def delete_if_same(self, entry: CacheEntry) -> bool:
        """Remove `entry` only if it has not been replaced meanwhile."""
        with self._lock:
            if self._entries.get(entry.key) is entry:
                del self._entries[entry.key]
                return True
            return False

    def entries(self) -> list[CacheEntry]:
        with self._lock:
            return list(self._entries.values())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ============================================================
# RESPONSE CACHE
# ============================================================

class ResponseCache:
    """
    TTL cache in front of idempotent operations.

    Usage:
        cache = ResponseCache()
        cache.put_for("price:1:0xabc", prices, ResourceClass.PRICE)
        entry = cache.get("price:1:0xabc")
        if entry is not None:
            prices = entry.value
    """

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        policy: Optional[TTLPolicy] = None,
        clock: Optional[ClockProtocol] = None,
        enabled: bool = True,
    ) -> None:
        self._store = store if store is not None else InMemoryCacheStore()
        self._policy = policy if policy is not None else TTLPolicy()
        self._clock = clock if clock is not None else SystemClock()
        self._enabled = enabled
        self._stats = CacheStats()
        self._stats_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def policy(self) -> TTLPolicy:
        return self._policy

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for `key`, or None on a miss."""
        if not self._enabled:
            return None

        now = self._clock.timestamp()
        try:
            entry = self._store.get(key)
        except Exception as e:
            self._record_error("read", key, e)
            return None

        if entry is None:
            self._bump("misses")
            return None

        if entry.is_expired(now):
            self._bump("misses")
            self._bump("expirations")
            self._discard(entry)
            logger.debug(f"[cache] Expired {key} (age={entry.age_seconds(now):.1f}s)")
            return None

        self._bump("hits")
        return entry

    def put(self, key: str, value: Any, ttl: float) -> None:
        """Store `value` under `key`, replacing any existing entry."""
        if not self._enabled:
            return
        entry = CacheEntry(
            key=key,
            value=value,
            stored_at=self._clock.timestamp(),
            ttl=ttl,
        )
        try:
            self._store.put(entry)
        except Exception as e:
            self._record_error("write", key, e)
            return
        self._bump("writes")

    def put_for(
        self,
        key: str,
        value: Any,
        resource_class: Optional[ResourceClass],
    ) -> None:
        """Store `value` with the TTL of its resource class."""
        self.put(key, value, self._policy.ttl_for(resource_class))

    def invalidate(self, key: str) -> None:
        try:
            self._store.delete(key)
        except Exception as e:
            self._record_error("invalidate", key, e)

    def clear(self) -> None:
        try:
            self._store.clear()
        except Exception as e:
            self._record_error("clear", None, e)

    def sweep_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock.timestamp()
        try:
            expired = [entry for entry in self._store.entries() if entry.is_expired(now)]
        except Exception as e:
            self._record_error("sweep", None, e)
            return 0

        removed = 0
        for entry in expired:
            if self._discard(entry):
                removed += 1

        if removed:
            self._bump("expirations", removed)
            logger.debug(f"[cache] Swept {removed} expired entries")
        return removed

    async def run_sweeper(self, interval_seconds: float) -> None:
        """Periodically sweep expired entries until cancelled."""
        logger.info(f"[cache] Sweeper started (interval={interval_seconds}s)")
        try:
            while True:
                await asyncio.sleep(interval_seconds)
                self.sweep_expired()
        finally:
            logger.info("[cache] Sweeper stopped")

    def get_stats(self) -> CacheStats:
        with self._stats_lock:
            stats = CacheStats(**vars(self._stats))
        try:
            stats.size = len(self._store)
        except Exception:
            stats.size = 0
        return stats

    # ------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------

    def _discard(self, entry: CacheEntry) -> bool:
        try:
            if isinstance(self._store, InMemoryCacheStore):
                return self._store.delete_if_same(entry)
            self._store.delete(entry.key)
            return True
        except Exception as e:
            self._record_error("invalidate", entry.key, e)
            return False

    def _bump(self, counter: str, amount: int = 1) -> None:
        with self._stats_lock:
            setattr(self._stats, counter, getattr(self._stats, counter) + amount)

    def _record_error(self, operation: str, key: Optional[str], error: Exception) -> None:
        self._bump("errors")
        if operation == "read":
            self._bump("misses")
        logger.warning(f"[cache] Store {operation} failed for {key}: {error}")
