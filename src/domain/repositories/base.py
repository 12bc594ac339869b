"""Generic repository base interface.

Repository[T] is the root abstraction for all data-access interfaces in this
domain layer.  Concrete implementations live in src/infrastructure/persistence/
and are wired at the application boundary via dependency injection.

Design notes:
  - All methods are async to accommodate async database drivers (asyncpg / SQLAlchemy async).
    Cancellation is cooperative: cancelling the awaiting task abandons the
    operation, and nothing is durable until the owning session commits.
  - T is the domain model type (never an ORM row or DTO) and carries an int id.
  - Absence is a normal outcome here: get_by_id() returns None, update()
    returns 0 and delete() returns False.  Deciding whether absence is an
    error belongs to the service layer.
  - Store failures surface as exceptions; this layer never builds Results.
  - find() takes a Criterion so the predicate is evaluated by the store;
    query() returns a lazy handle for further composition.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Generic, TypeVar

from src.domain.models.base import Entity

from .criteria import Criterion
from .query import Query

T = TypeVar("T", bound=Entity)


class Repository(ABC, Generic[T]):
    """Abstract CRUD + query interface for one entity type."""

    @abstractmethod
    async def add(self, entity: T) -> int:
        """Persist a new entity and return the identity assigned by the store."""

    @abstractmethod
    async def add_range(self, entities: Iterable[T]) -> list[int]:
        """Persist several entities; identities are returned in input order."""

    @abstractmethod
    async def update(self, entity: T) -> int:
        """Persist changes to an existing entity; return rows affected (0 if absent)."""

    @abstractmethod
    async def delete(self, id: int) -> bool:
        """Remove the entity with the given id; False if it did not exist."""

    @abstractmethod
    async def get_by_id(self, id: int) -> T | None:
        """Return the entity with the given id, or None if not found."""

    @abstractmethod
    async def get_all(self) -> list[T]:
        """Return every entity, ordered by id."""

    @abstractmethod
    async def find(self, criterion: Criterion) -> list[T]:
        """Return the entities matching criterion, ordered by id."""

    @abstractmethod
    def query(self, include: str | None = None) -> Query[T]:
        """Return a lazy query handle, optionally eager-loading a relationship path."""
