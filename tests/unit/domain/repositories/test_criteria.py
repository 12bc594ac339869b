"""Tests for src/domain/repositories/criteria.py: in-memory evaluation."""

import pytest

from src.domain.models.library import Book
from src.domain.repositories.criteria import And, Comparison, Not, Operator, Or, field

DUNE = Book(id=1, title="Dune", author_id=3)
ANON = Book(id=2, title="Beowulf", author_id=None)


# --- Builders ---

def test_field_builds_comparison():
    assert field("title").eq("Dune") == Comparison("title", Operator.EQ, "Dune")


def test_in_normalizes_values_to_tuple():
    assert field("id").in_([1, 2]).value == (1, 2)


def test_and_operator_builds_and_node():
    criterion = field("id").eq(1) & field("title").eq("Dune")
    assert isinstance(criterion, And)
    assert len(criterion.operands) == 2


def test_or_operator_builds_or_node():
    assert isinstance(field("id").eq(1) | field("id").eq(2), Or)


def test_invert_builds_not_node():
    assert isinstance(~field("id").eq(1), Not)


def test_criteria_are_immutable():
    criterion = field("id").eq(1)
    with pytest.raises(AttributeError):
        criterion.value = 2  # type: ignore[misc]


# --- matches() ---

@pytest.mark.parametrize(
    "criterion, expected",
    [
        (field("title").eq("Dune"), True),
        (field("title").ne("Dune"), False),
        (field("id").lt(2), True),
        (field("id").le(1), True),
        (field("id").gt(1), False),
        (field("id").ge(1), True),
        (field("id").in_([1, 5]), True),
        (field("title").contains("UN"), True),
        (field("title").startswith("du"), True),
        (field("author_id").is_null(), False),
    ],
)
def test_comparison_matches(criterion, expected):
    assert criterion.matches(DUNE) is expected


def test_none_attribute_only_matches_null_checks():
    assert field("author_id").is_null().matches(ANON)
    assert field("author_id").eq(None).matches(ANON)
    assert not field("author_id").ne(3).matches(ANON)
    assert not field("author_id").gt(0).matches(ANON)


def test_ne_none_matches_present_values():
    assert field("author_id").ne(None).matches(DUNE)


def test_and_requires_every_operand():
    assert not (field("id").eq(1) & field("title").eq("Beowulf")).matches(DUNE)


def test_or_requires_any_operand():
    assert (field("id").eq(9) | field("title").eq("Dune")).matches(DUNE)


def test_not_negates():
    assert (~field("title").eq("Beowulf")).matches(DUNE)


def test_unknown_field_raises():
    with pytest.raises(AttributeError):
        field("isbn").eq("x").matches(DUNE)
