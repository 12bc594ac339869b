"""Concrete SQLAlchemy repository implementations.

Exports all SqlRepository classes and the get_repositories() factory function
for wiring at the application boundary (FastAPI dependency injection).
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .authors import SqlAuthorRepository
from .base import SqlQuery, SqlRepository
from .books import SqlBookRepository


@dataclass
class Repositories:
    """All repository instances bound to a single AsyncSession."""

    authors: SqlAuthorRepository
    books: SqlBookRepository


def get_repositories(session: AsyncSession) -> Repositories:
    """Construct all repositories bound to the given session.

    Intended for use as a FastAPI dependency:

        async def handler(
            session: AsyncSession = Depends(get_session),
        ) -> ...:
            repos = get_repositories(session)
            book = await repos.books.get_by_id(book_id)
    """
    return Repositories(
        authors=SqlAuthorRepository(session),
        books=SqlBookRepository(session),
    )


__all__ = [
    "SqlRepository",
    "SqlQuery",
    "SqlAuthorRepository",
    "SqlBookRepository",
    "Repositories",
    "get_repositories",
]
