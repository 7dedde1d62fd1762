"""Uniform result shape returned by every list, membership and favorites operation.

Expected failures (bad input, missing records, ownership, invariant
violations) come back as a failed ``Result`` carrying an ``ErrorKind``.
Only infrastructure faults such as an unreachable database propagate as
exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Kinds of expected failure."""

    UNAUTHENTICATED = "unauthenticated"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    OWNERSHIP_ERROR = "ownership_error"
    UNIQUENESS_VIOLATION = "uniqueness_violation"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    DUPLICATE_MEMBERSHIP = "duplicate_membership"
    INVALID_MEMBERS = "invalid_members"
    INCOMPLETE_REORDER = "incomplete_reorder"


class ResultError(Exception):
    """Raised by ``Result.unwrap`` on a failed result."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success payload or tagged failure."""

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(success=False, error=kind, message=message)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """Return the payload or raise ``ResultError`` for a failure."""
        if not self.success:
            raise ResultError(self.error, self.message or self.error.value)
        return self.data
