"""In-memory repository implementations.

Used for local runs and tests where no database is available.  Identities are
assigned sequentially starting at 1 and are never reused.

There is no query language here: find() and Query.where() evaluate each
Criterion with Criterion.matches() over a full scan of the stored entities.
Field names in criteria, orderings and include paths are checked against the
entity's fields when the query is built, so a typo fails even on an empty
store.  Include paths have no further effect: InMemoryBookRepository resolves
Book.author on every read when it is given the author repository, and
otherwise returns books as they were stored.

Every operation completes without suspending, so each call is atomic with
respect to other tasks on the same event loop.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from src.domain.models.base import Entity
from src.domain.models.library import Author, Book
from src.domain.repositories.authors import AuthorRepository
from src.domain.repositories.base import Repository
from src.domain.repositories.books import BookRepository
from src.domain.repositories.criteria import And, Comparison, Criterion, Not, Or
from src.domain.repositories.query import Query

T = TypeVar("T", bound=Entity)


def _check_field(entity_type: type[Entity], name: str) -> None:
    if name not in entity_type.model_fields:
        raise ValueError(f"{entity_type.__name__} has no field {name!r}")


def _criterion_fields(criterion: Criterion) -> Iterator[str]:
    if isinstance(criterion, Comparison):
        yield criterion.field
    elif isinstance(criterion, (And, Or)):
        for operand in criterion.operands:
            yield from _criterion_fields(operand)
    elif isinstance(criterion, Not):
        yield from _criterion_fields(criterion.operand)
    else:
        raise TypeError(f"Unsupported criterion: {type(criterion).__name__}")


def _check_criterion(entity_type: type[Entity], criterion: Criterion) -> None:
    for name in _criterion_fields(criterion):
        _check_field(entity_type, name)


def _sort_key(field: str) -> Callable[[Any], tuple[bool, Any]]:
    def key(entity: Any) -> tuple[bool, Any]:
        value = getattr(entity, field)
        return (value is None, value)

    return key


class InMemoryQuery(Query[T], Generic[T]):
    def __init__(
        self,
        entity_type: type[T],
        source: Callable[[], list[T]],
        filters: tuple[Criterion, ...] = (),
        ordering: tuple[tuple[str, bool], ...] = (),
        offset: int = 0,
        limit: int | None = None,
    ) -> None:
        self._entity_type = entity_type
        self._source = source
        self._filters = filters
        self._ordering = ordering
        self._offset = offset
        self._limit = limit

    def _copy(self, **changes: Any) -> InMemoryQuery[T]:
        state = {
            "filters": self._filters,
            "ordering": self._ordering,
            "offset": self._offset,
            "limit": self._limit,
        }
        state.update(changes)
        return InMemoryQuery(self._entity_type, self._source, **state)

    def where(self, criterion: Criterion) -> InMemoryQuery[T]:
        _check_criterion(self._entity_type, criterion)
        return self._copy(filters=self._filters + (criterion,))

    def order_by(self, field: str, descending: bool = False) -> InMemoryQuery[T]:
        _check_field(self._entity_type, field)
        return self._copy(ordering=self._ordering + ((field, descending),))

    def skip(self, count: int) -> InMemoryQuery[T]:
        if count < 0:
            raise ValueError("skip count must be >= 0")
        return self._copy(offset=count)

    def take(self, count: int) -> InMemoryQuery[T]:
        if count < 0:
            raise ValueError("take count must be >= 0")
        return self._copy(limit=count)

    def _matching(self) -> list[T]:
        return [e for e in self._source() if all(c.matches(e) for c in self._filters)]

    async def to_list(self) -> list[T]:
        rows = self._matching()
        # Stable sorts applied last-key-first give multi-key ordering.
        for field, descending in reversed(self._ordering):
            rows.sort(key=_sort_key(field), reverse=descending)
        end = None if self._limit is None else self._offset + self._limit
        return rows[self._offset:end]

    async def first(self) -> T | None:
        rows = await self.to_list()
        return rows[0] if rows else None

    async def count(self) -> int:
        return len(self._matching())


class InMemoryRepository(Repository[T], Generic[T]):
    def __init__(self, entity_type: type[T], entities: Iterable[T] = ()) -> None:
        self._entity_type = entity_type
        self._rows: dict[int, T] = {}
        self._next_id = 1
        for entity in entities:
            self._insert(entity)

    def _insert(self, entity: T) -> int:
        new_id = self._next_id
        self._next_id += 1
        self._rows[new_id] = entity.with_id(new_id)
        return new_id

    def _present(self, entity: T) -> T:
        """Hook applied to every entity a read hands out."""
        return entity

    def _snapshot(self) -> list[T]:
        return [self._present(self._rows[key]) for key in sorted(self._rows)]

    async def add(self, entity: T) -> int:
        return self._insert(entity)

    async def add_range(self, entities: Iterable[T]) -> list[int]:
        return [self._insert(entity) for entity in list(entities)]

    async def update(self, entity: T) -> int:
        if entity.is_transient:
            raise ValueError(f"Cannot update a transient {type(entity).__name__}")
        if entity.id not in self._rows:
            return 0
        self._rows[entity.id] = entity
        return 1

    async def delete(self, id: int) -> bool:
        return self._rows.pop(id, None) is not None

    async def get_by_id(self, id: int) -> T | None:
        entity = self._rows.get(id)
        return self._present(entity) if entity is not None else None

    async def get_all(self) -> list[T]:
        return self._snapshot()

    async def find(self, criterion: Criterion) -> list[T]:
        _check_criterion(self._entity_type, criterion)
        return [entity for entity in self._snapshot() if criterion.matches(entity)]

    def query(self, include: str | None = None) -> InMemoryQuery[T]:
        if include:
            _check_field(self._entity_type, include.split(".")[0])
        return InMemoryQuery(self._entity_type, self._snapshot)


class InMemoryAuthorRepository(InMemoryRepository[Author], AuthorRepository):
    def __init__(self, entities: Iterable[Author] = ()) -> None:
        super().__init__(Author, entities)

    def lookup(self, id: int) -> Author | None:
        """Synchronous get_by_id, for resolving Book.author."""
        return self._rows.get(id)


class InMemoryBookRepository(InMemoryRepository[Book], BookRepository):
    def __init__(
        self,
        entities: Iterable[Book] = (),
        authors: InMemoryAuthorRepository | None = None,
    ) -> None:
        super().__init__(Book, entities)
        self._authors = authors

    def _present(self, entity: Book) -> Book:
        if self._authors is None:
            return entity
        author = self._authors.lookup(entity.author_id) if entity.author_id is not None else None
        return entity.model_copy(update={"author": author})
