"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in src/infrastructure/persistence/ and are
wired at the application boundary via dependency injection.

Import from this package rather than individual modules to avoid coupling
services to specific repository module paths.
"""

from .authors import AuthorRepository
from .base import Repository
from .books import BookRepository
from .criteria import Comparison, Criterion, FieldRef, Operator, field
from .query import Query

__all__ = [
    "Repository",
    "AuthorRepository",
    "BookRepository",
    "Query",
    "Criterion",
    "Comparison",
    "FieldRef",
    "Operator",
    "field",
]
