"""Author repository interface."""

from __future__ import annotations

from src.domain.models.library import Author

from .base import Repository


class AuthorRepository(Repository[Author]):
    """Read/write interface for Author entities.

    Adds nothing to the generic contract; it exists so services depend on a
    named port rather than Repository[Author].
    """
