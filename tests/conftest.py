"""Pytest configuration and shared fixtures.

This module provides fixtures for testing shelflists, including an
in-memory database, owners and their books, and the managers under test.
"""

from typing import Callable

import pytest

from shelflists.config import reset_config
from shelflists.db.models import Book
from shelflists.db.schemas import BookCreate
from shelflists.db.sqlite import Database, reset_db
from shelflists.favorites import FavoritesManager
from shelflists.lists import ListReorderer, MembershipManager, ReadingListManager

OWNER = "user-alice"
OTHER_OWNER = "user-bob"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db() -> Database:
    """Create an in-memory database for testing."""
    reset_db()
    reset_config()
    database = Database(":memory:")
    database.create_tables()
    return database


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def list_manager(db: Database) -> ReadingListManager:
    return ReadingListManager(db)


@pytest.fixture
def membership_manager(db: Database) -> MembershipManager:
    return MembershipManager(db)


@pytest.fixture
def reorderer(db: Database) -> ListReorderer:
    return ListReorderer(db)


@pytest.fixture
def favorites(db: Database) -> FavoritesManager:
    return FavoritesManager(db)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def make_book(db: Database) -> Callable[..., Book]:
    """Factory creating a book for an owner."""
    counter = {"n": 0}

    def _make(owner_id: str = OWNER, title: str = None) -> Book:
        counter["n"] += 1
        return db.create_book(BookCreate(
            owner_id=owner_id,
            title=title or f"Book {counter['n']}",
            author=f"Author {counter['n']}",
        ))

    return _make


@pytest.fixture
def sample_books(make_book) -> list[Book]:
    """Seven books owned by OWNER, one more than a favorites list holds."""
    return [make_book() for _ in range(7)]


@pytest.fixture
def standard_list(list_manager: ReadingListManager):
    """A standard list owned by OWNER."""
    return list_manager.create_list(OWNER, "To Read").unwrap()
