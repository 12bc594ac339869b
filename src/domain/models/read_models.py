"""Read models exposed to API surfaces.

Plain field-for-field projections of the domain entities.  Instances are
frozen so a cached collection can be shared between concurrent readers.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class AuthorModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    first_name: str
    last_name: str
    email: str | None = None


class BookModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    author: AuthorModel | None = None
