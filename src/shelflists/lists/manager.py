"""Manager for reading lists: creation, metadata updates, deletion and lookups."""

import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import asc, delete, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import Book
from ..db.sqlite import Database
from ..errors import integrity_failure, unauthenticated, validation_failure
from ..results import ErrorKind, Result
from .access import Identifier, clean_owner, find_favorites_list, load_owned_list
from .models import ReadingList, ReadingListBook
from .schemas import (
    ListBookWithDetails,
    ListType,
    ListVisibility,
    ReadingListCreate,
    ReadingListResponse,
    ReadingListSummary,
    ReadingListUpdate,
    ReadingListWithBooks,
)

logger = logging.getLogger(__name__)


class ReadingListManager:
    """Manager for reading list operations."""

    def __init__(self, db: Database):
        """Initialize the reading list manager.

        Args:
            db: Database instance
        """
        self.db = db

    # ========================================================================
    # Reading List CRUD
    # ========================================================================

    def create_list(
        self,
        owner_id: Optional[str],
        title: str,
        description: Optional[str] = None,
        visibility: Optional[ListVisibility] = None,
        list_type: Optional[ListType] = None,
        year: Optional[str] = None,
    ) -> Result[ReadingListResponse]:
        """Create a new reading list.

        Only one all-time favorites list may exist per owner, and only one
        favorites list per owner and year. The check runs in the same
        transaction as the insert; a concurrent insert that slips past it
        trips a unique index and is reported the same way.

        Args:
            owner_id: Acting principal
            title: List title, 1-200 characters after trimming
            description: Optional description, up to 2000 characters
            visibility: Defaults to private
            list_type: Defaults to standard
            year: Required for, and only allowed on, favorites_year lists

        Returns:
            Result with the created list
        """
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        fields = {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "visibility": visibility,
            "list_type": list_type,
            "year": year,
        }
        try:
            payload = ReadingListCreate(**{k: v for k, v in fields.items() if v is not None})
        except ValidationError as exc:
            return validation_failure(exc)

        try:
            with self.db.get_session() as session:
                if payload.list_type.is_favorites:
                    existing = find_favorites_list(session, owner_id, payload.year)
                    if existing is not None:
                        return Result.fail(
                            ErrorKind.UNIQUENESS_VIOLATION,
                            _uniqueness_message(payload.year),
                        )

                db_list = ReadingList(
                    owner_id=owner_id,
                    title=payload.title,
                    description=payload.description,
                    visibility=payload.visibility.value,
                    list_type=payload.list_type.value,
                    year=payload.year,
                )
                session.add(db_list)
                session.flush()

                response = self._to_list_response(db_list)
        except IntegrityError as exc:
            return integrity_failure(exc)

        logger.debug("Created %s list %s for %s", response.list_type.value, response.id, owner_id)
        return Result.ok(response)

    def get_list(
        self, owner_id: Optional[str], list_id: Identifier
    ) -> Result[ReadingListResponse]:
        """Get a reading list the owner holds."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        with self.db.get_session() as session:
            loaded = load_owned_list(session, owner_id, list_id)
            if not loaded:
                return loaded
            return Result.ok(self._to_list_response(loaded.data))

    def update_list(
        self,
        owner_id: Optional[str],
        list_id: Identifier,
        title: Optional[str] = None,
        description: Optional[str] = None,
        visibility: Optional[ListVisibility] = None,
        cover_image: Optional[str] = None,
    ) -> Result[ReadingListResponse]:
        """Update a reading list's metadata.

        Only the fields passed are changed. An empty description or cover
        image clears it. Type and year are fixed at creation.

        Args:
            owner_id: Acting principal
            list_id: List UUID
            title: New title
            description: New description
            visibility: New visibility
            cover_image: New cover image reference

        Returns:
            Result with the updated list
        """
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        fields = {
            "title": title,
            "description": description,
            "visibility": visibility,
            "cover_image": cover_image,
        }
        try:
            updates = ReadingListUpdate(**{k: v for k, v in fields.items() if v is not None})
        except ValidationError as exc:
            return validation_failure(exc)

        with self.db.get_session() as session:
            loaded = load_owned_list(session, owner_id, list_id)
            if not loaded:
                return loaded
            reading_list = loaded.data

            for field, value in updates.model_dump(exclude_unset=True).items():
                if field == "visibility":
                    value = ListVisibility(value).value
                elif field in ("description", "cover_image"):
                    value = value or None
                setattr(reading_list, field, value)

            session.flush()
            response = self._to_list_response(reading_list)

        logger.debug("Updated list %s", response.id)
        return Result.ok(response)

    def delete_list(self, owner_id: Optional[str], list_id: Identifier) -> Result[None]:
        """Delete a reading list and, in the same transaction, all its memberships."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        with self.db.get_session() as session:
            loaded = load_owned_list(session, owner_id, list_id)
            if not loaded:
                return loaded

            session.execute(
                delete(ReadingListBook).where(ReadingListBook.list_id == str(list_id))
            )
            session.delete(loaded.data)

        logger.debug("Deleted list %s", list_id)
        return Result.ok()

    def get_user_lists(self, owner_id: Optional[str]) -> Result[list[ReadingListSummary]]:
        """Get every list the owner holds, most recently updated first."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        with self.db.get_session() as session:
            stmt = (
                select(ReadingList, func.count(ReadingListBook.id))
                .outerjoin(ReadingListBook, ReadingListBook.list_id == ReadingList.id)
                .where(ReadingList.owner_id == owner_id)
                .group_by(ReadingList.id)
                .order_by(desc(ReadingList.updated_at), asc(ReadingList.title))
            )
            rows = session.execute(stmt).all()

            return Result.ok([
                self._to_list_summary(reading_list, book_count)
                for reading_list, book_count in rows
            ])

    def get_list_with_books(
        self, owner_id: Optional[str], list_id: Identifier
    ) -> Result[ReadingListWithBooks]:
        """Get a reading list with all its books ordered by position."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        with self.db.get_session() as session:
            loaded = load_owned_list(session, owner_id, list_id)
            if not loaded:
                return loaded

            return Result.ok(ReadingListWithBooks(
                list=self._to_list_response(loaded.data),
                books=list_books_with_details(session, loaded.data.id),
            ))

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def _to_list_response(self, reading_list: ReadingList) -> ReadingListResponse:
        return ReadingListResponse.model_validate(reading_list)

    def _to_list_summary(self, reading_list: ReadingList, book_count: int) -> ReadingListSummary:
        return ReadingListSummary(
            id=reading_list.id,
            title=reading_list.title,
            list_type=ListType(reading_list.list_type),
            type_display=reading_list.type_display,
            visibility=ListVisibility(reading_list.visibility),
            year=reading_list.year,
            book_count=book_count,
            updated_at=reading_list.updated_at,
        )


def list_books_with_details(session: Session, list_id: str) -> list[ListBookWithDetails]:
    """Memberships of a list joined with their books, in position order."""
    stmt = (
        select(ReadingListBook, Book)
        .join(Book, Book.id == ReadingListBook.book_id)
        .where(ReadingListBook.list_id == list_id)
        .order_by(asc(ReadingListBook.position), asc(ReadingListBook.added_at))
    )
    return [
        ListBookWithDetails(
            id=entry.id,
            list_id=entry.list_id,
            book_id=entry.book_id,
            position=entry.position,
            notes=entry.notes,
            added_at=entry.added_at,
            book_title=book.title,
            book_author=book.author,
            book_cover=book.cover,
        )
        for entry, book in session.execute(stmt).all()
    ]


def _uniqueness_message(year: Optional[str]) -> str:
    if year:
        return f"User already has a favorites list for year {year}"
    return "User already has an all-time favorites list"
