"""Translate Results into HTTP responses.

This is the single place where an ErrorKind becomes a transport status:

    Result success       → 200 with the JSON-encoded value
    UnitResult success   → 204, no body
    VALIDATION           → 400 with every error
    NOT_FOUND            → 404 with the first error
    CONFLICT             → 409 with the first error
    UNAUTHORIZED         → 401, no body
    UNEXPECTED / other   → 500 with a generic body (no message detail)

The status of a failure is decided by its first error's kind.
"""

from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from src.domain.models.enums import ErrorKind
from src.domain.results import Error, Result, UnitResult

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_GENERIC_ERROR_BODY = {"code": "internal_error", "message": "An internal error occurred."}


def _error_body(error: Error) -> dict[str, str]:
    return {"code": error.code, "message": error.message}


def failure_response(errors: tuple[Error, ...]) -> Response:
    kind = errors[0].kind
    code = STATUS_BY_KIND.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if kind is ErrorKind.VALIDATION:
        return JSONResponse(status_code=code, content={"errors": [_error_body(e) for e in errors]})
    if kind in (ErrorKind.NOT_FOUND, ErrorKind.CONFLICT):
        return JSONResponse(status_code=code, content=_error_body(errors[0]))
    if kind is ErrorKind.UNAUTHORIZED:
        return Response(status_code=code)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=_GENERIC_ERROR_BODY)


def _ok(value: Any) -> Response:
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(value))


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def to_http_response(result: Result[Any] | UnitResult) -> Response:
    if isinstance(result, UnitResult):
        return result.match(_no_content, failure_response)
    return result.match(_ok, failure_response)
