"""Tests for the get_repositories() DI factory."""

from unittest.mock import AsyncMock

from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlAuthorRepository,
    SqlBookRepository,
    get_repositories,
)


def _repos():
    return get_repositories(AsyncMock())


def test_get_repositories_returns_repositories_instance():
    assert isinstance(_repos(), Repositories)


def test_repositories_authors_is_correct_type():
    assert isinstance(_repos().authors, SqlAuthorRepository)


def test_repositories_books_is_correct_type():
    assert isinstance(_repos().books, SqlBookRepository)


def test_repositories_share_one_session():
    session = AsyncMock()
    repos = get_repositories(session)
    assert repos.authors._session is session
    assert repos.books._session is session


def test_repositories_dataclass_has_two_fields():
    assert len(Repositories.__dataclass_fields__) == 2
