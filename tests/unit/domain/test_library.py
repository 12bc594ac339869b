"""Tests for src/domain/models/base.py, library.py and read_models.py."""

import pytest
from pydantic import ValidationError

from src.domain.models.library import Author, Book
from src.domain.models.read_models import AuthorModel, BookModel


def _author(**overrides):
    defaults = dict(first_name="Ursula", last_name="Le Guin", email="ursula@example.org")
    defaults.update(overrides)
    return Author(**defaults)


# --- Entity identity ---

def test_new_entity_is_transient():
    assert Book.create("The Dispossessed").is_transient


def test_with_id_binds_identity():
    book = Book.create("The Dispossessed").with_id(7)
    assert book.id == 7
    assert not book.is_transient


def test_with_id_returns_copy():
    original = Book.create("The Dispossessed")
    original.with_id(7)
    assert original.id is None


def test_entity_is_frozen():
    book = Book(id=1, title="Earthsea")
    with pytest.raises(ValidationError):
        book.title = "Tehanu"  # type: ignore[misc]


# --- Author ---

def test_author_email_is_optional():
    assert _author(email=None).email is None


# --- Book ---

def test_book_create_sets_author_id():
    book = Book.create("Earthsea", author_id=3)
    assert book.author_id == 3
    assert book.author is None


def test_book_rejects_empty_title():
    with pytest.raises(ValidationError):
        Book(title="")


def test_book_author_reference_is_optional():
    assert Book(title="Beowulf").author_id is None


# --- Read models ---

def test_book_model_is_frozen():
    model = BookModel(id=1, title="Earthsea")
    with pytest.raises(ValidationError):
        model.title = "Tehanu"  # type: ignore[misc]


def test_book_model_equality_is_field_based():
    author = AuthorModel(id=2, first_name="Ursula", last_name="Le Guin")
    assert BookModel(id=1, title="Earthsea", author=author) == BookModel(
        id=1, title="Earthsea", author=author
    )
