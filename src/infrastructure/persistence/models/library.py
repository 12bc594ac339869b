"""Catalogue ORM models: authors and books."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    books: Mapped[list["Book"]] = relationship(back_populates="author", lazy="raise")


class Book(Base):
    """A catalogue entry.

    author_id is nullable; deleting an author leaves its books unattributed.
    Relationships use lazy="raise": under asyncio every related row must be
    eager-loaded explicitly (selectinload) through an include path.
    """

    __tablename__ = "books"
    __table_args__ = (UniqueConstraint("title", name="uq_books_title"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="SET NULL"), nullable=True
    )

    author: Mapped[Optional["Author"]] = relationship(back_populates="books", lazy="raise")
