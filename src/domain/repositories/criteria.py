"""Typed filter DSL for repository predicates.

Predicates are immutable value objects rather than closures so the
persistence layer can translate them into its own query language (SQL for
the SQLAlchemy repositories) instead of loading rows and filtering in Python.

    field("title").contains("dune") & ~field("author_id").is_null()

Every criterion can also be evaluated against an in-memory entity with
matches(); stores without a query language fall back to that full scan.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operator(str, Enum):
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    IN = "in"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    IS_NULL = "is_null"


class Criterion:
    """Base class for filter expressions; supports &, | and ~."""

    def matches(self, entity: Any) -> bool:
        raise NotImplementedError

    def __and__(self, other: Criterion) -> Criterion:
        return And((self, other))

    def __or__(self, other: Criterion) -> Criterion:
        return Or((self, other))

    def __invert__(self) -> Criterion:
        return Not(self)


@dataclass(frozen=True)
class Comparison(Criterion):
    """A single field/operator/value test.

    Text operators (contains, startswith) are case-insensitive.  A None
    attribute only satisfies is_null() and eq(None), matching SQL NULL
    semantics so in-memory and SQL evaluation agree.
    """

    field: str
    op: Operator
    value: Any = None

    def matches(self, entity: Any) -> bool:
        actual = getattr(entity, self.field)
        if self.op is Operator.IS_NULL:
            return actual is None
        if self.value is None and self.op in (Operator.EQ, Operator.NE):
            return (actual is None) == (self.op is Operator.EQ)
        if actual is None:
            return False
        if self.op is Operator.EQ:
            return actual == self.value
        if self.op is Operator.NE:
            return actual != self.value
        if self.op is Operator.IN:
            return actual in self.value
        if self.op is Operator.CONTAINS:
            return str(self.value).lower() in str(actual).lower()
        if self.op is Operator.STARTSWITH:
            return str(actual).lower().startswith(str(self.value).lower())
        if self.op is Operator.LT:
            return actual < self.value
        if self.op is Operator.LE:
            return actual <= self.value
        if self.op is Operator.GT:
            return actual > self.value
        if self.op is Operator.GE:
            return actual >= self.value
        raise ValueError(f"Unsupported operator: {self.op}")


@dataclass(frozen=True)
class And(Criterion):
    operands: tuple[Criterion, ...]

    def matches(self, entity: Any) -> bool:
        return all(c.matches(entity) for c in self.operands)


@dataclass(frozen=True)
class Or(Criterion):
    operands: tuple[Criterion, ...]

    def matches(self, entity: Any) -> bool:
        return any(c.matches(entity) for c in self.operands)


@dataclass(frozen=True)
class Not(Criterion):
    operand: Criterion

    def matches(self, entity: Any) -> bool:
        return not self.operand.matches(entity)


@dataclass(frozen=True)
class FieldRef:
    """Builder for comparisons on a named entity field."""

    name: str

    def eq(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.EQ, value)

    def ne(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.NE, value)

    def lt(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.LT, value)

    def le(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.LE, value)

    def gt(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.GT, value)

    def ge(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.GE, value)

    def in_(self, values: Any) -> Comparison:
        return Comparison(self.name, Operator.IN, tuple(values))

    def contains(self, text: str) -> Comparison:
        return Comparison(self.name, Operator.CONTAINS, text)

    def startswith(self, text: str) -> Comparison:
        return Comparison(self.name, Operator.STARTSWITH, text)

    def is_null(self) -> Comparison:
        return Comparison(self.name, Operator.IS_NULL)


def field(name: str) -> FieldRef:
    return FieldRef(name)
