"""
Explicit result variants returned by the gates, services and the transaction engine.

Every operation answers ``Ok(value)`` or ``Err(kind, detail)``; the request
boundary turns an ``Err`` into an HTTP status with a single lookup in
``STATUS_BY_KIND``.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from fastapi import status

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(str, enum.Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"            # uniqueness violations
    BUSINESS_RULE = "business_rule"  # state-machine violations
    INTERNAL = "internal"


STATUS_BY_KIND = {
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.BUSINESS_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    detail: str

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


Result = Union[Ok[T], Err]


def is_ok(result: "Result[Any]") -> bool:
    return isinstance(result, Ok)


def and_then(result: "Result[T]", fn: Callable[[T], "Result[U]"]) -> "Result[U]":
    """Feed the value of an ``Ok`` into ``fn``; pass an ``Err`` through untouched."""
    if isinstance(result, Err):
        return result
    return fn(result.value)


def not_found(entity: str) -> Err:
    return Err(ErrorKind.NOT_FOUND, f"{entity} not found")


def missing_fields(fields) -> Err:
    return Err(ErrorKind.VALIDATION, f"Missing required fields: {', '.join(fields)}")
