"""Entity <-> read-model mapping.

Field-for-field copies.  A book's author is mapped only when it was
eager-loaded; author_id alone does not produce an AuthorModel.
"""

from __future__ import annotations

from src.domain.models.library import Author, Book
from src.domain.models.read_models import AuthorModel, BookModel


def _require_id(entity: Author | Book) -> int:
    if entity.id is None:
        raise ValueError(f"Cannot map a transient {type(entity).__name__} to a read model")
    return entity.id


def author_to_model(author: Author) -> AuthorModel:
    return AuthorModel(
        id=_require_id(author),
        first_name=author.first_name,
        last_name=author.last_name,
        email=author.email,
    )


def book_to_model(book: Book) -> BookModel:
    return BookModel(
        id=_require_id(book),
        title=book.title,
        author=author_to_model(book.author) if book.author is not None else None,
    )


def author_from_model(model: AuthorModel) -> Author:
    return Author(
        id=model.id,
        first_name=model.first_name,
        last_name=model.last_name,
        email=model.email,
    )


def book_from_model(model: BookModel) -> Book:
    author = author_from_model(model.author) if model.author is not None else None
    return Book(
        id=model.id,
        title=model.title,
        author_id=author.id if author is not None else None,
        author=author,
    )
