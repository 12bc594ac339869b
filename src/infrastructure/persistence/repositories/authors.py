"""SQLAlchemy implementation of AuthorRepository."""

from __future__ import annotations

from typing import Any

from src.domain.models.library import Author as DomainAuthor
from src.domain.repositories.authors import AuthorRepository
from src.infrastructure.persistence.models.library import Author as OrmAuthor

from .base import SqlRepository


class SqlAuthorRepository(SqlRepository[DomainAuthor, OrmAuthor], AuthorRepository):
    model = OrmAuthor

    @staticmethod
    def _to_domain(row: OrmAuthor) -> DomainAuthor:
        return DomainAuthor(
            id=row.id,
            first_name=row.first_name,
            last_name=row.last_name,
            email=row.email,
        )

    @staticmethod
    def _to_row(entity: DomainAuthor) -> OrmAuthor:
        return OrmAuthor(
            first_name=entity.first_name,
            last_name=entity.last_name,
            email=entity.email,
        )

    @staticmethod
    def _values(entity: DomainAuthor) -> dict[str, Any]:
        return {
            "first_name": entity.first_name,
            "last_name": entity.last_name,
            "email": entity.email,
        }
