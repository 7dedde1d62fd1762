"""Tests for the Database class and the schema-level guards."""

import pytest
from sqlalchemy.exc import IntegrityError

from shelflists.db.schemas import BookCreate
from shelflists.errors import classify_integrity_error
from shelflists.lists.models import ReadingList, ReadingListBook
from shelflists.results import ErrorKind

from ..conftest import OTHER_OWNER, OWNER


class TestBooks:
    """Tests for book operations."""

    def test_create_and_get_book(self, db):
        book = db.create_book(BookCreate(
            owner_id=OWNER, title="Dune", author="Frank Herbert", isbn="978-0-441-17271-9"
        ))

        fetched = db.get_book(book.id)

        assert fetched.title == "Dune"
        assert fetched.owner_id == OWNER
        assert fetched.isbn == "9780441172719"

    def test_get_missing_book(self, db):
        assert db.get_book("missing") is None

    def test_books_by_owner(self, db, make_book):
        make_book(title="Zebra")
        make_book(title="Apple")
        make_book(owner_id=OTHER_OWNER, title="Other")

        titles = [book.title for book in db.get_books_by_owner(OWNER)]

        assert titles == ["Apple", "Zebra"]

    def test_session_rolls_back_on_error(self, db):
        with pytest.raises(RuntimeError):
            with db.get_session() as session:
                db.create_book(
                    BookCreate(owner_id=OWNER, title="Ghost", author="Nobody"), session=session
                )
                raise RuntimeError("boom")

        assert db.get_books_by_owner(OWNER) == []


class TestConstraints:
    """The store refuses invariant violations even without the managers."""

    def _insert(self, db, *rows):
        with db.get_session() as session:
            for row in rows:
                session.add(row)
                session.flush()

    def test_second_all_time_list_refused(self, db):
        self._insert(db, ReadingList(owner_id=OWNER, title="A", list_type="favorites_all"))

        with pytest.raises(IntegrityError) as excinfo:
            self._insert(db, ReadingList(owner_id=OWNER, title="B", list_type="favorites_all"))

        assert classify_integrity_error(excinfo.value) == ErrorKind.UNIQUENESS_VIOLATION

    def test_second_year_list_refused(self, db):
        self._insert(
            db, ReadingList(owner_id=OWNER, title="A", list_type="favorites_year", year="2024")
        )

        with pytest.raises(IntegrityError) as excinfo:
            self._insert(
                db,
                ReadingList(owner_id=OWNER, title="B", list_type="favorites_year", year="2024"),
            )

        assert classify_integrity_error(excinfo.value) == ErrorKind.UNIQUENESS_VIOLATION

    def test_standard_lists_unconstrained(self, db):
        self._insert(
            db,
            ReadingList(owner_id=OWNER, title="A", list_type="standard"),
            ReadingList(owner_id=OWNER, title="B", list_type="standard"),
        )

    def test_duplicate_membership_refused(self, db, make_book):
        book = make_book()
        list_id = "list-standard"
        self._insert(db, ReadingList(id=list_id, owner_id=OWNER, title="A"))
        self._insert(db, ReadingListBook(list_id=list_id, book_id=book.id, position=100))

        with pytest.raises(IntegrityError) as excinfo:
            self._insert(db, ReadingListBook(list_id=list_id, book_id=book.id, position=200))

        assert classify_integrity_error(excinfo.value) == ErrorKind.DUPLICATE_MEMBERSHIP

    def test_capacity_trigger(self, db, make_book):
        books = [make_book() for _ in range(7)]
        list_id = "list-favorites"
        self._insert(
            db, ReadingList(id=list_id, owner_id=OWNER, title="Faves", list_type="favorites_all")
        )
        self._insert(db, *[
            ReadingListBook(list_id=list_id, book_id=book.id, position=(i + 1) * 100)
            for i, book in enumerate(books[:6])
        ])

        with pytest.raises(IntegrityError) as excinfo:
            self._insert(db, ReadingListBook(list_id=list_id, book_id=books[6].id, position=700))

        assert classify_integrity_error(excinfo.value) == ErrorKind.CAPACITY_EXCEEDED
