"""Book repository interface."""

from __future__ import annotations

from src.domain.models.library import Book

from .base import Repository
from .criteria import field


class BookRepository(Repository[Book]):
    """Read/write interface for Book entities.

    Implementations eager-load the "author" relationship for get_by_id,
    get_all and find, so read models can be built without a second fetch.
    query("author") does the same for lazy handles.
    """

    async def find_by_title(self, title: str) -> list[Book]:
        """Return books whose title equals title exactly."""
        return await self.find(field("title").eq(title))
