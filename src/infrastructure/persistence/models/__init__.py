"""ORM model registry: imports every mapper class so it is registered with
Base.metadata before SQLAlchemy configures mappers.
"""

from src.infrastructure.persistence.models.library import Author, Book

__all__ = [
    "Author",
    "Book",
]
