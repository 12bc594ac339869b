"""Lazy, composable query handle.

Query[T] is returned by Repository.query().  Composition methods (where,
order_by, skip, take) return a new handle and never touch the store; only
to_list(), first() and count() execute.  This lets projection / filter /
sort adapters add their own predicates before anything is fetched.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .criteria import Criterion

T = TypeVar("T")


class Query(ABC, Generic[T]):
    @abstractmethod
    def where(self, criterion: Criterion) -> Query[T]:
        """Return a handle further restricted by criterion (ANDed with existing filters)."""

    @abstractmethod
    def order_by(self, field: str, descending: bool = False) -> Query[T]:
        """Return a handle sorted by field; repeated calls add secondary keys."""

    @abstractmethod
    def skip(self, count: int) -> Query[T]:
        """Return a handle that skips the first count results."""

    @abstractmethod
    def take(self, count: int) -> Query[T]:
        """Return a handle limited to count results."""

    @abstractmethod
    async def to_list(self) -> list[T]:
        """Execute and return every matching entity."""

    @abstractmethod
    async def first(self) -> T | None:
        """Execute and return the first matching entity, or None."""

    @abstractmethod
    async def count(self) -> int:
        """Execute and return the number of matching entities (ignores skip/take)."""
