"""Translate domain Criterion trees into SQLAlchemy boolean clauses.

Field names are checked against the mapped columns of the ORM model, so an
unknown field raises ValueError before any SQL is emitted.  Negation follows
SQL three-valued logic: ~field("x").eq(1) does not match rows where x IS NULL.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, inspect, not_, or_
from sqlalchemy.sql.elements import ColumnElement

from src.domain.repositories.criteria import And, Comparison, Criterion, Not, Operator, Or


def column_for(model: type[Any], name: str) -> Any:
    """Return the mapped column attribute model.<name>, or raise ValueError."""
    if name not in inspect(model).columns:
        raise ValueError(f"{model.__name__} has no column {name!r}")
    return getattr(model, name)


def _compile_comparison(comparison: Comparison, model: type[Any]) -> ColumnElement[bool]:
    column = column_for(model, comparison.field)
    op, value = comparison.op, comparison.value

    if op is Operator.IS_NULL or (op is Operator.EQ and value is None):
        return column.is_(None)
    if op is Operator.NE and value is None:
        return column.is_not(None)
    if op is Operator.EQ:
        return column == value
    if op is Operator.NE:
        return column != value
    if op is Operator.IN:
        return column.in_(value)
    if op is Operator.CONTAINS:
        return column.icontains(value, autoescape=True)
    if op is Operator.STARTSWITH:
        return column.istartswith(value, autoescape=True)
    if op is Operator.LT:
        return column < value
    if op is Operator.LE:
        return column <= value
    if op is Operator.GT:
        return column > value
    if op is Operator.GE:
        return column >= value
    raise ValueError(f"Unsupported operator: {op}")


def compile_criterion(criterion: Criterion, model: type[Any]) -> ColumnElement[bool]:
    if isinstance(criterion, Comparison):
        return _compile_comparison(criterion, model)
    if isinstance(criterion, And):
        return and_(*(compile_criterion(c, model) for c in criterion.operands))
    if isinstance(criterion, Or):
        return or_(*(compile_criterion(c, model) for c in criterion.operands))
    if isinstance(criterion, Not):
        return not_(compile_criterion(criterion.operand, model))
    raise TypeError(f"Unsupported criterion: {type(criterion).__name__}")
