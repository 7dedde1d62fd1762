"""Manager for ranked favorites.

Favorites live in ordinary reading lists of type favorites_all (one per
owner) or favorites_year (one per owner and year), capped at six books.
Callers address them by slot number 1-6 instead of raw position.

``set_favorite`` works in two explicit steps:

1. ``resolve_favorites_list`` finds the owner's favorites list for the
   year, creating it when missing.
2. The book's membership in that list is inserted, or moved to the new
   slot when it is already there.

Two books may end up in the same slot; no collision check is made and
``fetch_favorites`` returns both, earliest added first.
"""

import logging
import re
from typing import Optional, Union

from sqlalchemy import asc, select
from sqlalchemy.exc import IntegrityError

from ..db.models import Book
from ..db.schemas import BookResponse
from ..db.sqlite import Database
from ..errors import integrity_failure, unauthenticated
from ..lists.access import (
    Identifier,
    clean_owner,
    count_members,
    find_favorites_list,
    find_membership,
    load_owned_book,
)
from ..lists.manager import ReadingListManager
from ..lists.models import ReadingList, ReadingListBook
from ..lists.schemas import (
    FAVORITES_CAPACITY,
    ListBookResponse,
    ListType,
    ListVisibility,
    ReadingListResponse,
)
from ..results import ErrorKind, Result
from .schemas import FavoriteBook
from .slots import MAX_SLOT, MIN_SLOT, is_valid_slot, position_to_slot, slot_to_position

logger = logging.getLogger(__name__)

FULL_MESSAGE = (
    f"Favorites list already contains {FAVORITES_CAPACITY} books. "
    "Remove one before adding another."
)

Year = Union[str, int, None]

LEADING_YEAR = re.compile(r"\s*([+-]?\d+)")


def favorites_title(year: Optional[str]) -> str:
    """Title given to an automatically created favorites list."""
    return f"Favorite Books of {year}" if year else "All-Time Favorites"


class FavoritesManager:
    """Manager for the six ranked favorite slots."""

    def __init__(self, db: Database):
        """Initialize the favorites manager.

        Args:
            db: Database instance
        """
        self.db = db
        self.lists = ReadingListManager(db)

    def resolve_favorites_list(
        self, owner_id: Optional[str], year: Year = None, create: bool = False
    ) -> Result[ReadingListResponse]:
        """Find the owner's favorites list for ``year`` (all-time when None).

        With ``create`` a missing list is created, titled by
        ``favorites_title`` and private. When a concurrent call creates the
        same list first, that list is returned instead.
        """
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()
        year = _clean_year(year)

        existing = self._find_list(owner_id, year)
        if existing is not None:
            return Result.ok(existing)
        if not create:
            return Result.fail(ErrorKind.NOT_FOUND, "Favorites list not found")

        created = self.lists.create_list(
            owner_id,
            favorites_title(year),
            visibility=ListVisibility.PRIVATE,
            list_type=ListType.FAVORITES_YEAR if year else ListType.FAVORITES_ALL,
            year=year,
        )
        if created:
            logger.info("Created favorites list %s for %s", created.data.id, owner_id)
            return created

        if created.error == ErrorKind.UNIQUENESS_VIOLATION:
            # Lost a creation race; the winner's list is the one to use
            existing = self._find_list(owner_id, year)
            if existing is not None:
                return Result.ok(existing)
        return created

    def set_favorite(
        self,
        owner_id: Optional[str],
        book_id: Identifier,
        slot: int,
        year: Year = None,
    ) -> Result[ListBookResponse]:
        """Put a book in a favorite slot.

        Args:
            owner_id: Acting principal
            book_id: Book UUID, must belong to the owner
            slot: Slot number 1-6
            year: Year of the favorites list, or None for all-time

        Returns:
            Result with the membership holding the book
        """
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        if not is_valid_slot(slot):
            return Result.fail(
                ErrorKind.VALIDATION_ERROR,
                f"Position must be an integer between {MIN_SLOT} and {MAX_SLOT}",
            )

        with self.db.get_session() as session:
            book = load_owned_book(session, owner_id, book_id)
            if not book:
                return book

        resolved = self.resolve_favorites_list(owner_id, year, create=True)
        if not resolved:
            return resolved

        return self._upsert_slot(
            owner_id, str(resolved.data.id), str(book_id), slot_to_position(slot)
        )

    def remove_favorite(
        self, owner_id: Optional[str], book_id: Identifier, year: Year = None
    ) -> Result[None]:
        """Take a book out of favorites. The list itself is kept, even if empty."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()
        year = _clean_year(year)

        with self.db.get_session() as session:
            favorites_list = find_favorites_list(session, owner_id, year)
            if favorites_list is None:
                return Result.fail(ErrorKind.NOT_FOUND, "Favorites list not found")

            entry = find_membership(session, favorites_list.id, book_id)
            if entry is None:
                return Result.fail(ErrorKind.NOT_FOUND, "Book is not in favorites")

            session.delete(entry)

        logger.debug("Removed book %s from favorites (%s)", book_id, year or "all-time")
        return Result.ok()

    def fetch_favorites(
        self, owner_id: Optional[str], year: Year = None
    ) -> Result[list[FavoriteBook]]:
        """Get favorites in slot order. A missing favorites list means no favorites."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()
        year = _clean_year(year)

        with self.db.get_session() as session:
            favorites_list = find_favorites_list(session, owner_id, year)
            if favorites_list is None:
                return Result.ok([])

            stmt = (
                select(ReadingListBook, Book)
                .join(Book, Book.id == ReadingListBook.book_id)
                .where(ReadingListBook.list_id == favorites_list.id)
                .order_by(asc(ReadingListBook.position), asc(ReadingListBook.added_at))
            )
            return Result.ok([
                FavoriteBook(
                    book=BookResponse.model_validate(book),
                    slot=position_to_slot(entry.position),
                    position=entry.position,
                    notes=entry.notes,
                )
                for entry, book in session.execute(stmt).all()
            ])

    def fetch_available_years(self, owner_id: Optional[str]) -> Result[list[int]]:
        """Get the years the owner keeps favorites for, newest first."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        with self.db.get_session() as session:
            stmt = select(ReadingList.year).where(
                ReadingList.owner_id == owner_id,
                ReadingList.list_type == ListType.FAVORITES_YEAR.value,
                ReadingList.year.is_not(None),
            )
            tokens = session.execute(stmt).scalars().all()

        years = set()
        for token in tokens:
            # Leading digits count, as in "2024 (reread)"
            match = LEADING_YEAR.match(token)
            if match:
                years.add(int(match.group(1)))
        return Result.ok(sorted(years, reverse=True))

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def _find_list(self, owner_id: str, year: Optional[str]) -> Optional[ReadingListResponse]:
        with self.db.get_session() as session:
            favorites_list = find_favorites_list(session, owner_id, year)
            if favorites_list is None:
                return None
            return ReadingListResponse.model_validate(favorites_list)

    def _upsert_slot(
        self, owner_id: str, list_id: str, book_id: str, position: int
    ) -> Result[ListBookResponse]:
        try:
            with self.db.get_session() as session:
                if session.get(ReadingList, list_id) is None:
                    return Result.fail(ErrorKind.NOT_FOUND, "Favorites list not found")

                # Ownership is checked again in the writing transaction
                book = load_owned_book(session, owner_id, book_id)
                if not book:
                    return book

                entry = find_membership(session, list_id, book_id)
                if entry is not None:
                    # Moving within the list never changes the member count
                    entry.position = position
                else:
                    if count_members(session, list_id) >= FAVORITES_CAPACITY:
                        return Result.fail(ErrorKind.CAPACITY_EXCEEDED, FULL_MESSAGE)
                    entry = ReadingListBook(list_id=list_id, book_id=book_id, position=position)
                    session.add(entry)

                session.flush()
                response = ListBookResponse.model_validate(entry)
        except IntegrityError as exc:
            failure = integrity_failure(exc)
            if failure.error == ErrorKind.CAPACITY_EXCEEDED:
                return Result.fail(ErrorKind.CAPACITY_EXCEEDED, FULL_MESSAGE)
            return failure

        logger.debug("Book %s now at position %d in list %s", book_id, position, list_id)
        return Result.ok(response)


def _clean_year(year: Year) -> Optional[str]:
    if year is None:
        return None
    year = str(year).strip()
    return year or None
