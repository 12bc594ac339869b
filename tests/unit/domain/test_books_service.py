"""Tests for src/domain/services/books.py.

Uses the in-memory repositories and the real HybridCache (L1 only); fakes
below count repository calls or inject failures.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.domain.caching import Cache
from src.domain.models.enums import ErrorKind
from src.domain.models.library import Author, Book
from src.domain.models.read_models import AuthorModel, BookModel
from src.domain.services.books import BOOKS_ALL_KEY, REDACTED_MESSAGE, BooksService
from src.infrastructure.cache.hybrid import HybridCache
from src.infrastructure.persistence.memory import InMemoryAuthorRepository, InMemoryBookRepository


class _CountingBooks(InMemoryBookRepository):
    def __init__(self, entities=(), gate=None):
        super().__init__(entities)
        self.get_all_calls = 0
        self._gate = gate

    async def get_all(self):
        self.get_all_calls += 1
        if self._gate is not None:
            await self._gate.wait()
        return await super().get_all()


class _FailingBooks(InMemoryBookRepository):
    async def get_all(self):
        raise RuntimeError("connection refused by db-internal-7:5432")

    async def get_by_id(self, id):
        raise RuntimeError("connection refused by db-internal-7:5432")

    async def add(self, entity):
        raise RuntimeError("unique violation in books_pkey")


class _BrokenCache(Cache):
    async def get_or_create(self, key, factory, options=None):
        raise ConnectionError("redis unavailable")

    async def remove(self, key):
        raise ConnectionError("redis unavailable")


class _RecordingCache(HybridCache):
    def __init__(self, events):
        super().__init__()
        self._events = events

    async def remove(self, key):
        self._events.append("remove")
        await super().remove(key)


class _VanishingBooks(InMemoryBookRepository):
    """Book disappears between the existence check and the update."""

    async def update(self, entity):
        return 0


def _commit(events, fail=False):
    if fail:
        return AsyncMock(side_effect=RuntimeError("commit failed"))
    return AsyncMock(side_effect=lambda: events.append("commit"))


def _authors():
    return InMemoryAuthorRepository([Author(first_name="Frank", last_name="Herbert")])


def _service(books=None, authors=None, cache=None, **kwargs):
    return BooksService(
        books if books is not None else InMemoryBookRepository(),
        authors if authors is not None else _authors(),
        cache if cache is not None else HybridCache(),
        **kwargs,
    )


# --- get_books ---

async def test_get_books_empty_catalogue_is_success_with_empty_list():
    result = await _service().get_books()
    assert result.is_success
    assert result.value == []


async def test_get_books_maps_entities_to_read_models():
    herbert = Author(id=1, first_name="Frank", last_name="Herbert")
    books = InMemoryBookRepository([Book(title="Dune", author_id=1, author=herbert)])
    result = await _service(books=books).get_books()
    assert result.value == [
        BookModel(
            id=1,
            title="Dune",
            author=AuthorModel(id=1, first_name="Frank", last_name="Herbert"),
        )
    ]


async def test_get_books_twice_hits_repository_once():
    books = _CountingBooks([Book(title="Dune"), Book(title="Emma")])
    service = _service(books=books)
    first = await service.get_books()
    second = await service.get_books()
    assert first.value == second.value
    assert books.get_all_calls == 1


async def test_get_books_returns_independent_lists():
    service = _service(books=InMemoryBookRepository([Book(title="Dune")]))
    first = await service.get_books()
    first.value.clear()
    second = await service.get_books()
    assert len(second.value) == 1


async def test_concurrent_get_books_populates_once():
    gate = asyncio.Event()
    books = _CountingBooks([Book(title="Dune"), Book(title="Emma")], gate=gate)
    service = _service(books=books)

    tasks = [asyncio.create_task(service.get_books()) for _ in range(10)]
    for _ in range(3):
        await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks)

    assert books.get_all_calls == 1
    assert all(r.is_success for r in results)
    assert all(r.value == results[0].value for r in results)


async def test_get_books_repository_failure_is_unexpected():
    result = await _service(books=_FailingBooks()).get_books()
    assert result.is_failure
    assert [e.kind for e in result.errors] == [ErrorKind.UNEXPECTED]


async def test_get_books_redacts_exception_text_by_default():
    result = await _service(books=_FailingBooks()).get_books()
    assert "db-internal-7" not in result.first_error.message
    assert result.first_error.message == REDACTED_MESSAGE


async def test_get_books_exposes_exception_text_when_redaction_disabled():
    result = await _service(books=_FailingBooks(), redact_errors=False).get_books()
    assert "db-internal-7" in result.first_error.message


async def test_get_books_cache_failure_is_unexpected():
    result = await _service(cache=_BrokenCache()).get_books()
    assert result.first_error.kind is ErrorKind.UNEXPECTED


async def test_get_books_failure_is_not_cached():
    books = _CountingBooks([Book(title="Dune")])
    cache = HybridCache()
    service = _service(books=books, cache=cache)

    assert (await _service(books=_FailingBooks(), cache=cache).get_books()).is_failure
    assert (await service.get_books()).value[0].title == "Dune"
    assert books.get_all_calls == 1


async def test_get_books_logs_caught_exception(caplog):
    with caplog.at_level("ERROR", logger="src.domain.services.books"):
        await _service(books=_FailingBooks()).get_books()
    assert "books.get_all_failed" in caplog.text


# --- get_book ---

async def test_get_book_returns_read_model():
    books = InMemoryBookRepository([Book(title="Dune")])
    result = await _service(books=books).get_book(1)
    assert result.value == BookModel(id=1, title="Dune")


async def test_get_book_missing_is_not_found():
    result = await _service().get_book(42)
    assert result.first_error.kind is ErrorKind.NOT_FOUND
    assert result.first_error.code == "books.not_found"


async def test_get_book_non_positive_id_is_validation():
    result = await _service().get_book(0)
    assert result.first_error.kind is ErrorKind.VALIDATION


async def test_get_book_repository_failure_is_unexpected():
    result = await _service(books=_FailingBooks()).get_book(1)
    assert result.first_error.kind is ErrorKind.UNEXPECTED


# --- get_books_query ---

async def test_get_books_query_is_lazy_and_composable():
    books = InMemoryBookRepository([Book(title="Dune"), Book(title="Emma")])
    query = _service(books=books).get_books_query("author")
    await books.add(Book(title="Dracula"))
    titles = [b.title for b in await query.order_by("title").take(2).to_list()]
    assert titles == ["Dracula", "Dune"]


# --- create_book ---

async def test_create_book_returns_model_with_new_id():
    result = await _service().create_book("  Dune  ", author_id=1)
    assert result.value.id == 1
    assert result.value.title == "Dune"
    assert result.value.author.last_name == "Herbert"


async def test_create_book_reports_all_validation_errors():
    result = await _service().create_book("   ", author_id=0)
    assert [e.code for e in result.errors] == ["books.title_required", "authors.invalid_id"]
    assert all(e.kind is ErrorKind.VALIDATION for e in result.errors)


async def test_create_book_rejects_overlong_title():
    result = await _service().create_book("x" * 201)
    assert result.first_error.code == "books.title_too_long"


async def test_create_book_unknown_author_is_not_found():
    result = await _service().create_book("Dune", author_id=99)
    assert result.first_error.code == "authors.not_found"
    assert result.first_error.kind is ErrorKind.NOT_FOUND


async def test_create_book_duplicate_title_is_conflict():
    books = InMemoryBookRepository([Book(title="Dune")])
    result = await _service(books=books).create_book("Dune")
    assert result.first_error.kind is ErrorKind.CONFLICT


async def test_create_book_store_failure_is_unexpected():
    result = await _service(books=_FailingBooks()).create_book("Dune")
    assert result.first_error.kind is ErrorKind.UNEXPECTED


async def test_create_book_invalidates_cached_listing():
    books = _CountingBooks()
    service = _service(books=books)
    assert (await service.get_books()).value == []
    await service.create_book("Dune")
    assert [b.title for b in (await service.get_books()).value] == ["Dune"]
    assert books.get_all_calls == 2


async def test_create_book_succeeds_when_eviction_fails():
    result = await _service(cache=_BrokenCache()).create_book("Dune")
    assert result.is_success


# --- update_book ---

async def test_update_book_success():
    books = InMemoryBookRepository([Book(title="Dune")])
    result = await _service(books=books).update_book(1, "Dune Messiah", author_id=1)
    assert result.is_success
    assert (await books.get_by_id(1)).title == "Dune Messiah"


async def test_update_missing_book_is_not_found():
    result = await _service().update_book(5, "Dune")
    assert result.first_error.code == "books.not_found"


async def test_update_book_validation_collects_errors():
    result = await _service().update_book(-1, "")
    assert [e.code for e in result.errors] == ["books.invalid_id", "books.title_required"]


async def test_update_book_title_taken_by_other_book_is_conflict():
    books = InMemoryBookRepository([Book(title="Dune"), Book(title="Emma")])
    result = await _service(books=books).update_book(2, "Dune")
    assert result.first_error.kind is ErrorKind.CONFLICT


async def test_update_book_keeping_own_title_is_not_conflict():
    books = InMemoryBookRepository([Book(title="Dune")])
    assert (await _service(books=books).update_book(1, "Dune")).is_success


async def test_update_book_unknown_author_is_not_found():
    books = InMemoryBookRepository([Book(title="Dune")])
    result = await _service(books=books).update_book(1, "Dune", author_id=7)
    assert result.first_error.code == "authors.not_found"


# --- delete_book ---

async def test_delete_book_success_evicts_listing():
    books = InMemoryBookRepository([Book(title="Dune")])
    cache = HybridCache()
    service = _service(books=books, cache=cache)
    await service.get_books()
    assert (await service.delete_book(1)).is_success
    assert (await service.get_books()).value == []


async def test_delete_missing_book_is_not_found():
    result = await _service().delete_book(3)
    assert result.first_error.kind is ErrorKind.NOT_FOUND


async def test_delete_book_invalid_id_is_validation():
    result = await _service().delete_book(0)
    assert result.first_error.kind is ErrorKind.VALIDATION


def test_books_all_key():
    assert BOOKS_ALL_KEY == "books-all"


# --- author resolution ---

async def test_books_created_through_service_carry_their_author():
    authors = _authors()
    books = InMemoryBookRepository(authors=authors)
    service = _service(books=books, authors=authors)
    await service.create_book("Dune", author_id=1)

    listing = await service.get_books()
    single = await service.get_book(1)

    assert listing.value[0].author.last_name == "Herbert"
    assert single.value.author.last_name == "Herbert"


# --- commit then evict ---

WRITES = [
    pytest.param(lambda service: service.create_book("Dune Messiah"), id="create"),
    pytest.param(lambda service: service.update_book(1, "Dune Messiah"), id="update"),
    pytest.param(lambda service: service.delete_book(1), id="delete"),
]


@pytest.mark.parametrize("write", WRITES)
async def test_writes_commit_before_evicting(write):
    events = []
    service = _service(
        books=InMemoryBookRepository([Book(title="Dune")]),
        cache=_RecordingCache(events),
        commit=_commit(events),
    )
    assert (await write(service)).is_success
    assert events == ["commit", "remove"]


@pytest.mark.parametrize("write", WRITES)
async def test_failed_commit_is_unexpected_and_keeps_cache(write):
    events = []
    service = _service(
        books=InMemoryBookRepository([Book(title="Dune")]),
        cache=_RecordingCache(events),
        commit=_commit(events, fail=True),
    )
    result = await write(service)
    assert result.first_error.kind is ErrorKind.UNEXPECTED
    assert result.first_error.code.endswith("_failed")
    assert events == []


async def test_rejected_write_does_not_commit():
    commit = AsyncMock()
    service = _service(commit=commit)
    await service.delete_book(1)
    await service.update_book(1, "Dune")
    commit.assert_not_awaited()


# --- update of a missing book ---

async def test_update_missing_book_is_not_found_even_when_title_is_taken():
    books = InMemoryBookRepository([Book(title="Dune"), Book(title="Emma")])
    result = await _service(books=books).update_book(99, "Dune")
    assert result.first_error.code == "books.not_found"
    assert result.first_error.kind is ErrorKind.NOT_FOUND


async def test_update_of_concurrently_deleted_book_is_not_found_without_commit():
    commit = AsyncMock()
    service = _service(books=_VanishingBooks([Book(title="Dune")]), commit=commit)
    result = await service.update_book(1, "Dune Messiah")
    assert result.first_error.code == "books.not_found"
    commit.assert_not_awaited()
