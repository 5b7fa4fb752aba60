# skillbridge/services/errors.py
"""
Domain error taxonomy and the result type returned by lifecycle actions.

Guards raise ``DomainError``; lifecycle entry points convert it into an
``Err`` so callers handle both outcomes explicitly.
"""

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    INVALID_STATE = "invalid_state"
    VALIDATION_FAILED = "validation_failed"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    DUPLICATE_ACTIVE = "duplicate_active"


class DomainError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"DomainError({self.kind.value!r}, {self.message!r})"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def not_found(what: str) -> DomainError:
    return DomainError(ErrorKind.NOT_FOUND, f"{what} not found")


def unauthorized(message: str = "Not authorized") -> DomainError:
    return DomainError(ErrorKind.UNAUTHORIZED, message)


def invalid_state(message: str) -> DomainError:
    return DomainError(ErrorKind.INVALID_STATE, message)


def validation_failed(message: str) -> DomainError:
    return DomainError(ErrorKind.VALIDATION_FAILED, message)
