"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .base import Entity
from .enums import ErrorKind
from .library import Author, Book
from .read_models import AuthorModel, BookModel

__all__ = [
    "Entity",
    "ErrorKind",
    "Author",
    "Book",
    "AuthorModel",
    "BookModel",
]
