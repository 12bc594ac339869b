"""Catalogue domain models: authors and books.

These are pure domain objects with no ORM or persistence concerns.
A Book references its Author by foreign identity (author_id).  The author
attribute is only populated when the author was explicitly eager-loaded;
it is never traversed lazily.
"""

from __future__ import annotations

from pydantic import Field

from .base import Entity


class Author(Entity):
    first_name: str
    last_name: str
    email: str | None = None


class Book(Entity):
    """A catalogue entry.

    author_id is nullable: anonymous works and books whose author has not been
    catalogued yet are valid.  author is None unless the "author" include path
    was requested from the repository.
    """

    title: str = Field(min_length=1)
    author_id: int | None = None
    author: Author | None = None

    @classmethod
    def create(cls, title: str, author_id: int | None = None) -> Book:
        """Named constructor for a book that has not been persisted yet."""
        return cls(title=title, author_id=author_id)
