"""Cache port consumed by the read services.

The cache collaborator owns concurrency: get_or_create() guarantees that
concurrent misses on one key run the factory at most once, with every other
caller awaiting that single population.  Services must not add their own
locking on top of it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntryOptions:
    """Expiry settings for one cache entry.

    local_expiration bounds how long the near-process copy is trusted and
    should not exceed expiration; None means "same as expiration".
    """

    expiration: timedelta = timedelta(minutes=5)
    local_expiration: timedelta | None = timedelta(minutes=2)

    def __post_init__(self) -> None:
        if self.expiration <= timedelta(0):
            raise ValueError("expiration must be positive")
        if self.local_expiration is not None and self.local_expiration <= timedelta(0):
            raise ValueError("local_expiration must be positive")

    @property
    def effective_local_expiration(self) -> timedelta:
        if self.local_expiration is None:
            return self.expiration
        return min(self.local_expiration, self.expiration)


class Cache(ABC):
    @abstractmethod
    async def get_or_create(
        self,
        key: str,
        factory: Callable[[], Awaitable[V]],
        options: CacheEntryOptions | None = None,
    ) -> V:
        """Return the cached value for key, populating it with factory on a miss.

        Exceptions raised by factory propagate to every waiting caller and
        nothing is stored.
        """

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Drop key from every cache tier."""
