"""SQLAlchemy implementation of BookRepository."""

from __future__ import annotations

from typing import Any

from src.domain.models.library import Book as DomainBook
from src.domain.repositories.books import BookRepository
from src.infrastructure.persistence.models.library import Book as OrmBook

from .authors import SqlAuthorRepository
from .base import SqlRepository, loaded_attribute


class SqlBookRepository(SqlRepository[DomainBook, OrmBook], BookRepository):
    model = OrmBook
    default_includes = ("author",)

    @staticmethod
    def _to_domain(row: OrmBook) -> DomainBook:
        author_row = loaded_attribute(row, "author")
        return DomainBook(
            id=row.id,
            title=row.title,
            author_id=row.author_id,
            author=SqlAuthorRepository._to_domain(author_row) if author_row is not None else None,
        )

    @staticmethod
    def _to_row(entity: DomainBook) -> OrmBook:
        # The store assigns the identity; entity.author is never cascaded.
        return OrmBook(title=entity.title, author_id=entity.author_id)

    @staticmethod
    def _values(entity: DomainBook) -> dict[str, Any]:
        return {"title": entity.title, "author_id": entity.author_id}
