"""Generic SQLAlchemy repository and lazy query handle.

SqlRepository[T, O] implements the whole Repository[T] contract for one ORM
model O.  Subclasses only declare the model and the row <-> domain mapping.

Repositories call add()/flush()/execute() only, never commit().  The session
dependency owns the transaction (Unit-of-Work); a flush assigns identities so
add() can return them, but nothing is durable until the session commits.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, inspect, select
from sqlalchemy import update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from src.domain.models.base import Entity
from src.domain.repositories.base import Repository
from src.domain.repositories.criteria import Criterion
from src.domain.repositories.query import Query
from src.infrastructure.persistence.criteria import column_for, compile_criterion

T = TypeVar("T", bound=Entity)
O = TypeVar("O")


def loaded_attribute(row: Any, name: str) -> Any:
    """Return row.<name> if it was eager-loaded, otherwise None.

    Relationships are mapped with lazy="raise"; touching an unloaded one
    would raise, so mappers check the instance state first.
    """
    state = inspect(row, raiseerr=False)
    if state is not None and name in state.unloaded:
        return None
    return getattr(row, name, None)


def _relationship(model: type[Any], name: str) -> tuple[Any, type[Any]]:
    relationships = inspect(model).relationships
    if name not in relationships:
        raise ValueError(f"{model.__name__} has no relationship {name!r}")
    return getattr(model, name), relationships[name].mapper.class_


def include_loader(model: type[Any], path: str) -> Any:
    """Build a selectinload chain for a dotted relationship path ("author.books")."""
    first, *rest = path.split(".")
    attr, current = _relationship(model, first)
    loader = selectinload(attr)
    for name in rest:
        attr, current = _relationship(current, name)
        loader = loader.selectinload(attr)
    return loader


class SqlQuery(Query[T]):
    """Immutable query state; SQL is built and executed only by the terminal methods."""

    def __init__(
        self,
        session: AsyncSession,
        model: type[Any],
        to_domain: Callable[[Any], T],
        options: tuple[Any, ...] = (),
        filters: tuple[Any, ...] = (),
        ordering: tuple[Any, ...] = (),
        offset: int | None = None,
        limit: int | None = None,
    ) -> None:
        self._session = session
        self._model = model
        self._to_domain = to_domain
        self._options = options
        self._filters = filters
        self._ordering = ordering
        self._offset = offset
        self._limit = limit

    def _copy(self, **changes: Any) -> SqlQuery[T]:
        state = {
            "options": self._options,
            "filters": self._filters,
            "ordering": self._ordering,
            "offset": self._offset,
            "limit": self._limit,
        }
        state.update(changes)
        return SqlQuery(self._session, self._model, self._to_domain, **state)

    def where(self, criterion: Criterion) -> SqlQuery[T]:
        clause = compile_criterion(criterion, self._model)
        return self._copy(filters=self._filters + (clause,))

    def order_by(self, field: str, descending: bool = False) -> SqlQuery[T]:
        column = column_for(self._model, field)
        return self._copy(ordering=self._ordering + (column.desc() if descending else column.asc(),))

    def skip(self, count: int) -> SqlQuery[T]:
        if count < 0:
            raise ValueError("skip count must be >= 0")
        return self._copy(offset=count)

    def take(self, count: int) -> SqlQuery[T]:
        if count < 0:
            raise ValueError("take count must be >= 0")
        return self._copy(limit=count)

    def statement(self) -> Select[Any]:
        """The SELECT this handle would execute (ordered by id when unsorted)."""
        stmt = select(self._model).options(*self._options).where(*self._filters)
        stmt = stmt.order_by(*(self._ordering or (self._model.id.asc(),)))
        if self._offset is not None:
            stmt = stmt.offset(self._offset)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        return stmt

    async def to_list(self) -> list[T]:
        result = await self._session.execute(self.statement())
        return [self._to_domain(row) for row in result.scalars()]

    async def first(self) -> T | None:
        if self._limit == 0:
            return None
        result = await self._session.execute(self.statement().limit(1))
        row = result.scalars().first()
        return self._to_domain(row) if row is not None else None

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self._model).where(*self._filters)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class SqlRepository(Repository[T], Generic[T, O]):
    """Repository[T] over the ORM model O.

    Subclasses set `model`, implement the three mapping hooks, and may set
    `default_includes`: relationship paths eager-loaded by get_by_id,
    get_all and find.

    add_range() flushes the whole batch at once: either every row receives an
    identity or the flush raises and the session must be rolled back.
    """

    model: type[O]
    default_includes: tuple[str, ...] = ()

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # Mapping hooks ------------------------------------------------------ #

    @staticmethod
    def _to_domain(row: Any) -> T:
        raise NotImplementedError

    @staticmethod
    def _to_row(entity: Any) -> O:
        raise NotImplementedError

    @staticmethod
    def _values(entity: Any) -> dict[str, Any]:
        """Column values written by update()."""
        raise NotImplementedError

    # Repository contract ------------------------------------------------ #

    async def add(self, entity: T) -> int:
        row = self._to_row(entity)
        self._session.add(row)
        await self._session.flush()
        return row.id

    async def add_range(self, entities: Iterable[T]) -> list[int]:
        rows = [self._to_row(entity) for entity in entities]
        if not rows:
            return []
        self._session.add_all(rows)
        await self._session.flush()
        return [row.id for row in rows]

    async def update(self, entity: T) -> int:
        if entity.is_transient:
            raise ValueError(f"Cannot update a transient {type(entity).__name__}")
        stmt = (
            sa_update(self.model)
            .where(self.model.id == entity.id)
            .values(**self._values(entity))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    async def delete(self, id: int) -> bool:
        stmt = (
            sa_delete(self.model)
            .where(self.model.id == id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def get_by_id(self, id: int) -> T | None:
        stmt = select(self.model).options(*self._loaders(self.default_includes)).where(
            self.model.id == id
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    async def get_all(self) -> list[T]:
        return await self._query(self.default_includes).to_list()

    async def find(self, criterion: Criterion) -> list[T]:
        return await self._query(self.default_includes).where(criterion).to_list()

    def query(self, include: str | None = None) -> SqlQuery[T]:
        return self._query((include,) if include else ())

    # Helpers ------------------------------------------------------------ #

    def _loaders(self, paths: tuple[str, ...]) -> tuple[Any, ...]:
        return tuple(include_loader(self.model, path) for path in paths)

    def _query(self, paths: tuple[str, ...]) -> SqlQuery[T]:
        return SqlQuery(self._session, self.model, self._to_domain, options=self._loaders(paths))
