"""Translation of storage and validation exceptions into result failures."""

import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from .results import ErrorKind, Result

logger = logging.getLogger(__name__)

# Constraint, index and trigger names declared in lists/models.py
FAVORITES_ALL_INDEX = "uq_reading_lists_favorites_all"
FAVORITES_YEAR_INDEX = "uq_reading_lists_favorites_year"
BOOK_LIST_CONSTRAINT = "uq_reading_list_books_book_list"
CAPACITY_TRIGGER = "trg_reading_list_books_favorites_capacity"
CAPACITY_TRIGGER_MESSAGE = "favorites capacity exceeded"

UNIQUENESS_MESSAGE = "A favorites list of this kind already exists"
DUPLICATE_MESSAGE = "Book is already in this reading list"
CAPACITY_MESSAGE = "Favorites lists can contain a maximum of 6 books"


def classify_integrity_error(exc: IntegrityError) -> Optional[ErrorKind]:
    """Map a constraint violation to the error kind it stands for.

    SQLite reports the violated columns ("UNIQUE constraint failed:
    reading_lists.owner_id") while PostgreSQL reports the constraint name,
    so both spellings are checked.
    """
    text = str(exc.orig) if exc.orig is not None else str(exc)
    constraint = getattr(exc.orig, "constraint_name", "") or ""
    haystack = f"{text} {constraint}"

    if CAPACITY_TRIGGER_MESSAGE in haystack or CAPACITY_TRIGGER in haystack:
        return ErrorKind.CAPACITY_EXCEEDED
    if BOOK_LIST_CONSTRAINT in haystack or "reading_list_books.book_id" in haystack:
        return ErrorKind.DUPLICATE_MEMBERSHIP
    if (
        FAVORITES_ALL_INDEX in haystack
        or FAVORITES_YEAR_INDEX in haystack
        or "reading_lists.owner_id" in haystack
    ):
        return ErrorKind.UNIQUENESS_VIOLATION
    return None


def integrity_failure(exc: IntegrityError) -> Result:
    """Turn a recognised constraint violation into a failed result.

    Unrecognised violations are infrastructure faults and are re-raised.
    """
    kind = classify_integrity_error(exc)
    if kind is None:
        raise exc

    logger.warning("Constraint violation translated to %s: %s", kind.value, exc.orig)
    messages = {
        ErrorKind.CAPACITY_EXCEEDED: CAPACITY_MESSAGE,
        ErrorKind.DUPLICATE_MEMBERSHIP: DUPLICATE_MESSAGE,
        ErrorKind.UNIQUENESS_VIOLATION: UNIQUENESS_MESSAGE,
    }
    return Result.fail(kind, messages[kind])


def validation_failure(exc: ValidationError) -> Result:
    """Turn a pydantic validation error into a failed result."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        # Strip pydantic's "Value error, " prefix from custom validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        parts.append(f"{field}: {message}" if field else message)
    return Result.fail(ErrorKind.VALIDATION_ERROR, "; ".join(parts))


def unauthenticated() -> Result:
    return Result.fail(ErrorKind.UNAUTHENTICATED, "User not authenticated")
