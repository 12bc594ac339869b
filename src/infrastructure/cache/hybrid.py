"""Two-tier cache with single-flight population.

Tiers:
- L1: in-process TLRUCache, each entry expiring after its local expiration
  (or its full expiration when there is no L2).
- L2: optional Redis, values pickled and stored with SET ... EX.

get_or_create() on an L1 miss starts (or joins) one population task per key.
The task reads L2 and, only on an L2 miss, runs the factory; every concurrent
caller for that key awaits the same task, so N simultaneous misses cost one
factory call.  Each caller awaits through asyncio.shield(): cancelling one
caller does not disturb the others, and the shared task is cancelled only
when its last waiter goes away.  A population that fails or is cancelled
commits nothing to either tier.

remove() evicts both tiers and detaches any in-flight population so its
result is handed to the callers already waiting but is never stored.

Redis failures propagate to the caller; there is no silent fallback to the
factory.
"""

from __future__ import annotations

import asyncio
import logging
import pickle
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from cachetools import TLRUCache  # type: ignore[import-untyped]
from redis.asyncio import Redis

from src.domain.caching import Cache, CacheEntryOptions
from src.infrastructure.config import Settings

logger = logging.getLogger(__name__)

V = TypeVar("V")

_MISSING = object()


@dataclass(frozen=True)
class _LocalEntry:
    value: Any
    ttl: float  # seconds


class _Flight:
    """One in-progress population of a key."""

    __slots__ = ("task", "waiters")

    def __init__(self, task: asyncio.Task[Any]) -> None:
        self.task = task
        self.waiters = 0


def _local_expiry(key: str, entry: _LocalEntry, now: float) -> float:
    return now + entry.ttl


class HybridCache(Cache):
    def __init__(
        self,
        redis: Redis | None = None,
        *,
        max_entries: int = 1024,
        default_options: CacheEntryOptions | None = None,
        key_prefix: str = "cache:",
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._local: TLRUCache = TLRUCache(maxsize=max_entries, ttu=_local_expiry, timer=timer)
        self._redis = redis
        self._default_options = default_options or CacheEntryOptions()
        self._prefix = key_prefix
        self._flights: dict[str, _Flight] = {}

        # Statistics
        self.hits = 0
        self.misses = 0
        self.populations = 0

        logger.info(
            "Initialized HybridCache (max_entries=%d, l2=%s)",
            max_entries,
            "redis" if redis is not None else "none",
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> HybridCache:
        redis = Redis.from_url(settings.redis_url) if settings.redis_url else None
        return cls(
            redis,
            max_entries=settings.cache_max_entries,
            default_options=settings.cache_entry_options,
        )

    async def get_or_create(
        self,
        key: str,
        factory: Callable[[], Awaitable[V]],
        options: CacheEntryOptions | None = None,
    ) -> V:
        entry = self._local.get(key)
        if entry is not None:
            self.hits += 1
            return entry.value

        self.misses += 1
        flight = self._flights.get(key)
        if flight is None or flight.task.done():
            flight = self._start(key, factory, options or self._default_options)
        return await self._join(key, flight)

    async def remove(self, key: str) -> None:
        self._local.pop(key, None)
        # Unregistering detaches any in-flight population: it still answers its
        # waiters but no longer owns the key, so it stores nothing.
        self._flights.pop(key, None)
        if self._redis is not None:
            await self._redis.delete(self._redis_key(key))
        logger.debug("Removed cache key %r", key)

    def get_stats(self) -> dict[str, int]:
        return {
            "size": len(self._local),
            "max_size": int(self._local.maxsize),
            "hits": self.hits,
            "misses": self.misses,
            "populations": self.populations,
            "in_flight": len(self._flights),
        }

    # ------------------------------------------------------------------ #
    # Single-flight                                                        #
    # ------------------------------------------------------------------ #

    def _start(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        options: CacheEntryOptions,
    ) -> _Flight:
        # No await between the lookup in get_or_create and this registration,
        # so two tasks can never both start a flight for the same key.  The
        # task does not run before the registration below either.
        flight = _Flight(asyncio.ensure_future(self._populate(key, factory, options)))

        def _forget(_: asyncio.Task[Any]) -> None:
            if self._flights.get(key) is flight:
                del self._flights[key]

        flight.task.add_done_callback(_forget)
        self._flights[key] = flight
        return flight

    async def _join(self, key: str, flight: _Flight) -> Any:
        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                # Abandoned: later callers must start a fresh population.
                if self._flights.get(key) is flight:
                    del self._flights[key]
                flight.task.cancel()
                logger.debug("Cancelled abandoned population of %r", key)

    def _owns(self, key: str) -> bool:
        """True while the running population task is still registered for key."""
        flight = self._flights.get(key)
        return flight is not None and flight.task is asyncio.current_task()

    async def _populate(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        options: CacheEntryOptions,
    ) -> Any:
        value = await self._read_remote(key)
        if value is _MISSING:
            self.populations += 1
            logger.debug("Populating cache key %r", key)
            value = await factory()
            if self._owns(key):
                await self._write_remote(key, value, options)
        if self._owns(key):
            local_ttl = (
                options.effective_local_expiration if self._redis is not None else options.expiration
            )
            self._local[key] = _LocalEntry(value, local_ttl.total_seconds())
        return value

    # ------------------------------------------------------------------ #
    # L2                                                                   #
    # ------------------------------------------------------------------ #

    def _redis_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def _read_remote(self, key: str) -> Any:
        if self._redis is None:
            return _MISSING
        data = await self._redis.get(self._redis_key(key))
        if data is None:
            return _MISSING
        logger.debug("Cache HIT (L2): %s", key)
        return pickle.loads(data)

    async def _write_remote(self, key: str, value: Any, options: CacheEntryOptions) -> None:
        if self._redis is None:
            return
        await self._redis.set(self._redis_key(key), pickle.dumps(value), ex=options.expiration)
