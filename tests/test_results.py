"""Tests for Result plumbing and error translation."""

import pytest
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import IntegrityError

from shelflists.errors import classify_integrity_error, integrity_failure, validation_failure
from shelflists.results import ErrorKind, Result, ResultError


class TestResult:
    """Tests for the Result type."""

    def test_ok(self):
        result = Result.ok(42)

        assert result
        assert result.success
        assert result.data == 42
        assert result.error is None
        assert result.unwrap() == 42

    def test_fail(self):
        result = Result.fail(ErrorKind.NOT_FOUND, "Reading list not found")

        assert not result
        assert result.error == ErrorKind.NOT_FOUND
        assert result.data is None

    def test_unwrap_failure_raises(self):
        result = Result.fail(ErrorKind.CAPACITY_EXCEEDED, "full")

        with pytest.raises(ResultError) as excinfo:
            result.unwrap()

        assert excinfo.value.kind == ErrorKind.CAPACITY_EXCEEDED
        assert str(excinfo.value) == "full"

    def test_ok_without_payload(self):
        assert Result.ok().success


class _FakeOrig(Exception):
    def __init__(self, message, constraint_name=None):
        super().__init__(message)
        self.constraint_name = constraint_name


def _integrity(message, constraint_name=None) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, _FakeOrig(message, constraint_name))


class TestIntegrityTranslation:
    """Tests for mapping constraint violations to error kinds."""

    @pytest.mark.parametrize(
        "message,constraint,kind",
        [
            ("UNIQUE constraint failed: reading_lists.owner_id", None,
             ErrorKind.UNIQUENESS_VIOLATION),
            ("UNIQUE constraint failed: reading_lists.owner_id, reading_lists.year", None,
             ErrorKind.UNIQUENESS_VIOLATION),
            ("duplicate key value", "uq_reading_lists_favorites_year",
             ErrorKind.UNIQUENESS_VIOLATION),
            ("UNIQUE constraint failed: reading_list_books.book_id, reading_list_books.list_id",
             None, ErrorKind.DUPLICATE_MEMBERSHIP),
            ("duplicate key value", "uq_reading_list_books_book_list",
             ErrorKind.DUPLICATE_MEMBERSHIP),
            ("favorites capacity exceeded", None, ErrorKind.CAPACITY_EXCEEDED),
        ],
    )
    def test_classify(self, message, constraint, kind):
        assert classify_integrity_error(_integrity(message, constraint)) == kind

    def test_unknown_violation_reraised(self):
        exc = _integrity("NOT NULL constraint failed: books.title")

        assert classify_integrity_error(exc) is None
        with pytest.raises(IntegrityError):
            integrity_failure(exc)

    def test_failure_message(self):
        result = integrity_failure(_integrity("favorites capacity exceeded"))

        assert result.error == ErrorKind.CAPACITY_EXCEEDED
        assert "6" in result.message


class TestValidationTranslation:
    """Tests for converting pydantic errors."""

    def test_field_errors_joined(self):
        class Sample(BaseModel):
            title: str = Field(..., min_length=1)

        with pytest.raises(ValidationError) as excinfo:
            Sample(title="")

        result = validation_failure(excinfo.value)

        assert result.error == ErrorKind.VALIDATION_ERROR
        assert result.message.startswith("title:")
