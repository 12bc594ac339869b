"""Result and Error types for crossing layer boundaries without exceptions.

A Result is exactly one of:
  - success, carrying a value (Result) or nothing (UnitResult);
  - failure, carrying a non-empty, ordered tuple of Error objects.

Services return Results; the presentation layer consumes them with match().
Reading value on a failure, or errors on a success, is a contract violation
and raises ResultAccessError rather than returning a default.

map()/then() on a failure never call the supplied function and always
re-wrap the original error tuple unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from src.domain.models.enums import ErrorKind

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class ResultAccessError(RuntimeError):
    """Raised when the wrong side of a Result is accessed."""


class Error(BaseModel):
    """An immutable (code, message, kind) triple.

    code is unique within its domain (e.g. "books.not_found"); message is
    human-readable detail.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    kind: ErrorKind

    @classmethod
    def validation(cls, code: str, message: str) -> Error:
        return cls(code=code, message=message, kind=ErrorKind.VALIDATION)

    @classmethod
    def not_found(cls, code: str, message: str) -> Error:
        return cls(code=code, message=message, kind=ErrorKind.NOT_FOUND)

    @classmethod
    def conflict(cls, code: str, message: str) -> Error:
        return cls(code=code, message=message, kind=ErrorKind.CONFLICT)

    @classmethod
    def unauthorized(cls, code: str, message: str) -> Error:
        return cls(code=code, message=message, kind=ErrorKind.UNAUTHORIZED)

    @classmethod
    def unexpected(cls, code: str, message: str) -> Error:
        return cls(code=code, message=message, kind=ErrorKind.UNEXPECTED)


def _as_errors(errors: Error | Iterable[Error]) -> tuple[Error, ...]:
    collected = (errors,) if isinstance(errors, Error) else tuple(errors)
    if not collected:
        raise ValueError("A failed result must carry at least one error.")
    for error in collected:
        if not isinstance(error, Error):
            raise TypeError(f"Expected Error, got {type(error).__name__}")
    return collected


class _Outcome:
    """State shared by Result and UnitResult."""

    __slots__ = ("_errors",)

    def __init__(self, errors: tuple[Error, ...] | None) -> None:
        self._errors = errors

    @property
    def is_success(self) -> bool:
        return self._errors is None

    @property
    def is_failure(self) -> bool:
        return self._errors is not None

    @property
    def errors(self) -> tuple[Error, ...]:
        if self._errors is None:
            raise ResultAccessError("Cannot access errors on a successful result.")
        return self._errors

    @property
    def first_error(self) -> Error:
        return self.errors[0]


class Result(_Outcome, Generic[T]):
    """Success(value) or Failure(errors)."""

    __slots__ = ("_value",)

    def __init__(self, value: Any = None, errors: tuple[Error, ...] | None = None) -> None:
        super().__init__(errors)
        self._value = value

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, errors: Error | Iterable[Error]) -> Result[T]:
        return cls(errors=_as_errors(errors))

    @classmethod
    def combine(cls, *results: Result[Any]) -> Result[tuple[Any, ...]]:
        """Collect several results: success of all values, or every error in order."""
        errors = [e for r in results if r.is_failure for e in r.errors]
        if errors:
            return cls.failure(errors)
        return cls.success(tuple(r.value for r in results))

    @property
    def value(self) -> T:
        if self._errors is not None:
            raise ResultAccessError("Cannot access value on a failed result.")
        return self._value

    def match(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[tuple[Error, ...]], R],
    ) -> R:
        if self._errors is None:
            return on_success(self._value)
        return on_failure(self._errors)

    def map(self, transform: Callable[[T], U]) -> Result[U]:
        if self._errors is None:
            return Result.success(transform(self._value))
        return Result(errors=self._errors)

    def then(self, next_step: Callable[[T], Result[U]]) -> Result[U]:
        if self._errors is None:
            return next_step(self._value)
        return Result(errors=self._errors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._errors == other._errors and self._value == other._value

    def __repr__(self) -> str:
        if self._errors is None:
            return f"Result.success({self._value!r})"
        return f"Result.failure({list(self._errors)!r})"


class UnitResult(_Outcome):
    """Success with no value, or Failure(errors)."""

    __slots__ = ()

    @classmethod
    def success(cls) -> UnitResult:
        return cls(None)

    @classmethod
    def failure(cls, errors: Error | Iterable[Error]) -> UnitResult:
        return cls(_as_errors(errors))

    def match(
        self,
        on_success: Callable[[], R],
        on_failure: Callable[[tuple[Error, ...]], R],
    ) -> R:
        if self._errors is None:
            return on_success()
        return on_failure(self._errors)

    def then(self, next_step: Callable[[], Result[U]]) -> Result[U]:
        if self._errors is None:
            return next_step()
        return Result(errors=self._errors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnitResult):
            return NotImplemented
        return self._errors == other._errors

    def __repr__(self) -> str:
        if self._errors is None:
            return "UnitResult.success()"
        return f"UnitResult.failure({list(self._errors)!r})"


def ok(value: T) -> Result[T]:
    """Shorthand for Result.success(value)."""
    return Result.success(value)


def err(errors: Error | Iterable[Error]) -> Result[Any]:
    """Shorthand for Result.failure(errors)."""
    return Result.failure(errors)
