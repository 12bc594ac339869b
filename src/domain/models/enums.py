"""Domain enumerations.

String-valued enums use the str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (FastAPI / Pydantic default behaviour).
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed classification of failures.

    The presentation layer maps every member to a transport status; adding a
    member means updating that mapping as well.
    """

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    UNEXPECTED = "unexpected"
