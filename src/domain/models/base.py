"""Entity base model.

Every persisted domain object carries an integer identity.  The identity is
assigned by the persistence collaborator when the entity is first added and
never changes afterwards; id=None means "not persisted yet".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Marker base for domain records with a numeric identity."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None

    @property
    def is_transient(self) -> bool:
        return self.id is None

    def with_id(self, id: int) -> Entity:
        """Return a copy of this entity bound to the given identity."""
        return self.model_copy(update={"id": id})
