"""Domain services package."""

from .books import BOOKS_ALL_KEY, BooksService

__all__ = ["BOOKS_ALL_KEY", "BooksService"]
