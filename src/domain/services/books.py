"""Books service: cache-aside reads and validated writes.

This is the layer where exceptions stop.  Repository and cache failures are
caught here, logged, and returned as Error.unexpected(...) failures; the
other error kinds are produced explicitly by the checks below, never inferred
from exception types.  asyncio.CancelledError is not an Exception and
propagates unchanged.

Read path (get_books):
    cache.get_or_create("books-all")
        → on miss: repository.get_all() → book_to_model() each → tuple snapshot
    → Result.success(list(snapshot))

The cache guarantees a single population per key under concurrency, so this
service holds no locks.

Write path (create/update/delete):
    checks → repository write → commit() → cache.remove("books-all")

commit is the session's commit when the service shares a request session
(see src.infrastructure.services).  Evicting only after the commit means a
population that starts after the eviction reads committed rows; populations
already running when the eviction lands are detached by the cache and never
stored.  A failed commit is an unexpected failure and evicts nothing.
Without a commit hook (in-memory stores, or a caller that commits itself)
the eviction follows the write directly.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from src.domain.caching import Cache, CacheEntryOptions
from src.domain.models.library import Author, Book
from src.domain.models.read_models import BookModel
from src.domain.repositories.authors import AuthorRepository
from src.domain.repositories.books import BookRepository
from src.domain.repositories.query import Query
from src.domain.results import Error, Result, UnitResult

from .mappings import book_to_model

logger = logging.getLogger(__name__)

BOOKS_ALL_KEY = "books-all"
MAX_TITLE_LENGTH = 200
REDACTED_MESSAGE = "An unexpected error occurred."


def _validate_id(value: int, code: str, label: str) -> Result[int]:
    if value <= 0:
        return Result.failure(
            Error.validation(code, f"{label} must be a positive integer, got {value}.")
        )
    return Result.success(value)


def _check_title(title: str) -> Result[str]:
    if not title:
        return Result.failure(Error.validation("books.title_required", "Title is required."))
    if len(title) > MAX_TITLE_LENGTH:
        return Result.failure(
            Error.validation(
                "books.title_too_long",
                f"Title must be at most {MAX_TITLE_LENGTH} characters, got {len(title)}.",
            )
        )
    return Result.success(title)


def _validate_title(title: str) -> Result[str]:
    return Result.success(title).map(str.strip).then(_check_title)


def _validate_author_id(author_id: int | None) -> Result[int | None]:
    if author_id is None:
        return Result.success(None)
    return _validate_id(author_id, "authors.invalid_id", "Author id")


def _book_not_found(book_id: int) -> Error:
    return Error.not_found("books.not_found", f"Book {book_id} was not found.")


class BooksService:
    """Use cases over the book catalogue.

    Every public coroutine returns a Result/UnitResult; none raises for store
    or cache failures.
    """

    def __init__(
        self,
        books: BookRepository,
        authors: AuthorRepository,
        cache: Cache,
        *,
        cache_options: CacheEntryOptions | None = None,
        redact_errors: bool = True,
        commit: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._books = books
        self._authors = authors
        self._cache = cache
        self._cache_options = cache_options or CacheEntryOptions()
        self._redact_errors = redact_errors
        self._commit_hook = commit

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def get_books(self) -> Result[list[BookModel]]:
        """Return every book as a read model, served from cache when warm."""
        try:
            snapshot = await self._cache.get_or_create(
                BOOKS_ALL_KEY, self._load_books, self._cache_options
            )
        except Exception as exc:
            return Result.failure(self._unexpected("books.get_all_failed", exc))
        return Result.success(list(snapshot))

    async def get_book(self, book_id: int) -> Result[BookModel]:
        checked = _validate_id(book_id, "books.invalid_id", "Book id")
        if checked.is_failure:
            return Result.failure(checked.errors)
        try:
            book = await self._books.get_by_id(book_id)
        except Exception as exc:
            return Result.failure(self._unexpected("books.get_failed", exc))
        if book is None:
            return Result.failure(_book_not_found(book_id))
        return Result.success(book_to_model(book))

    def get_books_query(self, include: str | None = None) -> Query[Book]:
        """Lazy handle for projection/filter/sort adapters (e.g. a graph layer)."""
        return self._books.query(include)

    async def _load_books(self) -> tuple[BookModel, ...]:
        books = await self._books.get_all()
        logger.debug("Loaded %d books from the repository", len(books))
        return tuple(book_to_model(book) for book in books)

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    async def create_book(self, title: str, author_id: int | None = None) -> Result[BookModel]:
        checked = Result.combine(_validate_title(title), _validate_author_id(author_id))
        if checked.is_failure:
            return Result.failure(checked.errors)
        clean_title, _ = checked.value

        try:
            author: Author | None = None
            if author_id is not None:
                author = await self._authors.get_by_id(author_id)
                if author is None:
                    return Result.failure(
                        Error.not_found("authors.not_found", f"Author {author_id} was not found.")
                    )
            if await self._books.find_by_title(clean_title):
                return Result.failure(
                    Error.conflict(
                        "books.duplicate_title", f"A book titled {clean_title!r} already exists."
                    )
                )
            new_id = await self._books.add(Book.create(clean_title, author_id))
            await self._commit()
        except Exception as exc:
            return Result.failure(self._unexpected("books.create_failed", exc))

        await self._invalidate()
        return Result.success(
            book_to_model(Book(id=new_id, title=clean_title, author_id=author_id, author=author))
        )

    async def update_book(
        self, book_id: int, title: str, author_id: int | None = None
    ) -> UnitResult:
        checked = Result.combine(
            _validate_id(book_id, "books.invalid_id", "Book id"),
            _validate_title(title),
            _validate_author_id(author_id),
        )
        if checked.is_failure:
            return UnitResult.failure(checked.errors)
        _, clean_title, _ = checked.value

        try:
            if await self._books.get_by_id(book_id) is None:
                return UnitResult.failure(_book_not_found(book_id))
            if author_id is not None and await self._authors.get_by_id(author_id) is None:
                return UnitResult.failure(
                    Error.not_found("authors.not_found", f"Author {author_id} was not found.")
                )
            duplicates = [b for b in await self._books.find_by_title(clean_title) if b.id != book_id]
            if duplicates:
                return UnitResult.failure(
                    Error.conflict(
                        "books.duplicate_title", f"A book titled {clean_title!r} already exists."
                    )
                )
            affected = await self._books.update(
                Book(id=book_id, title=clean_title, author_id=author_id)
            )
            if affected == 0:
                # Deleted between the lookup above and the update.
                return UnitResult.failure(_book_not_found(book_id))
            await self._commit()
        except Exception as exc:
            return UnitResult.failure(self._unexpected("books.update_failed", exc))

        await self._invalidate()
        return UnitResult.success()

    async def delete_book(self, book_id: int) -> UnitResult:
        checked = _validate_id(book_id, "books.invalid_id", "Book id")
        if checked.is_failure:
            return UnitResult.failure(checked.errors)
        try:
            if not await self._books.delete(book_id):
                return UnitResult.failure(_book_not_found(book_id))
            await self._commit()
        except Exception as exc:
            return UnitResult.failure(self._unexpected("books.delete_failed", exc))

        await self._invalidate()
        return UnitResult.success()

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    async def _commit(self) -> None:
        if self._commit_hook is not None:
            await self._commit_hook()

    async def _invalidate(self) -> None:
        # The write already happened; a failed eviction only means bounded staleness.
        try:
            await self._cache.remove(BOOKS_ALL_KEY)
        except Exception:
            logger.warning("Could not evict %r from the cache", BOOKS_ALL_KEY, exc_info=True)

    def _unexpected(self, code: str, exc: Exception) -> Error:
        logger.exception("Unexpected failure (%s)", code)
        message = REDACTED_MESSAGE if self._redact_errors else str(exc)
        return Error.unexpected(code, message)
