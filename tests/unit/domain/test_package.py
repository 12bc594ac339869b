"""Tests for src/domain/models/__init__.py: package exports."""

from src.domain.models import __all__ as domain_all
from src.domain.models import Author, Book, BookModel, Entity, ErrorKind


def test_domain_models_exports_6_names():
    assert len(domain_all) == 6


def test_entity_importable_from_package():
    assert Entity.__name__ == "Entity"


def test_book_importable_from_package():
    assert issubclass(Book, Entity)


def test_author_importable_from_package():
    assert issubclass(Author, Entity)


def test_book_model_importable_from_package():
    assert BookModel.__name__ == "BookModel"


def test_error_kind_importable_from_package():
    assert ErrorKind.CONFLICT == "conflict"
