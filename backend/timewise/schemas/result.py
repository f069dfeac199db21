from __future__ import annotations

import enum
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

T = TypeVar("T")


class ErrorKind(enum.StrEnum):
    """Category of a failed service operation."""

    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class ServiceResult(BaseModel, Generic[T]):
    """Discriminated outcome of a service operation.

    Expected failures (authorization, validation, missing entities, state
    conflicts) are reported here instead of being raised, so the transport
    layer decides how to present them.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> ServiceResult[T]:
        return cls(success=False, error=message, error_kind=kind)

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> ServiceResult[T]:
        return cls.fail(ErrorKind.UNAUTHORIZED, message)

    @classmethod
    def invalid(cls, message: str) -> ServiceResult[T]:
        return cls.fail(ErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> ServiceResult[T]:
        return cls.fail(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> ServiceResult[T]:
        return cls.fail(ErrorKind.CONFLICT, message)


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten a pydantic validation error into one message naming each bad field."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "input"
        parts.append(f"{field}: {err['msg']}")
    return "Invalid input: " + "; ".join(parts)
