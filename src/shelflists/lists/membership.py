"""Attaching books to reading lists and detaching them again."""

import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ..db.sqlite import Database
from ..errors import (
    CAPACITY_MESSAGE,
    DUPLICATE_MESSAGE,
    integrity_failure,
    unauthenticated,
    validation_failure,
)
from ..results import ErrorKind, Result
from .access import (
    Identifier,
    clean_owner,
    count_members,
    find_membership,
    load_owned_book,
    load_owned_list,
)
from .models import ReadingListBook
from .schemas import (
    FAVORITES_CAPACITY,
    MAX_POSITION,
    ListBookResponse,
    MembershipCreate,
    NotesUpdate,
)

logger = logging.getLogger(__name__)

# Gap left between auto-assigned positions so books can be slotted in by hand
POSITION_GAP = 100


class MembershipManager:
    """Manager for the books held by reading lists."""

    def __init__(self, db: Database):
        """Initialize the membership manager.

        Args:
            db: Database instance
        """
        self.db = db

    def add_membership(
        self,
        owner_id: Optional[str],
        list_id: Identifier,
        book_id: Identifier,
        position: Optional[int] = None,
    ) -> Result[ListBookResponse]:
        """Add one of the owner's books to one of the owner's lists.

        Without an explicit position the book goes after the current last
        one, ``POSITION_GAP`` further down (100 for an empty list). An
        explicit position must be a non-negative integer not already used
        in the list.

        Args:
            owner_id: Acting principal
            list_id: List UUID
            book_id: Book UUID
            position: Optional explicit position

        Returns:
            Result with the created membership
        """
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        try:
            entry = MembershipCreate(book_id=str(book_id), position=position)
        except ValidationError as exc:
            return validation_failure(exc)

        try:
            with self.db.get_session() as session:
                loaded = load_owned_list(session, owner_id, list_id)
                if not loaded:
                    return loaded
                reading_list = loaded.data

                book = load_owned_book(session, owner_id, entry.book_id)
                if not book:
                    return book

                if reading_list.is_favorites and (
                    count_members(session, reading_list.id) >= FAVORITES_CAPACITY
                ):
                    return Result.fail(ErrorKind.CAPACITY_EXCEEDED, CAPACITY_MESSAGE)

                if find_membership(session, reading_list.id, entry.book_id) is not None:
                    return Result.fail(ErrorKind.DUPLICATE_MEMBERSHIP, DUPLICATE_MESSAGE)

                if entry.position is None:
                    highest = session.execute(
                        select(func.max(ReadingListBook.position)).where(
                            ReadingListBook.list_id == reading_list.id
                        )
                    ).scalar()
                    final_position = (highest or 0) + POSITION_GAP
                    if final_position > MAX_POSITION:
                        return Result.fail(
                            ErrorKind.VALIDATION_ERROR,
                            "No position left at the end of this list; reorder it first",
                        )
                else:
                    taken = session.execute(
                        select(ReadingListBook.id).where(
                            ReadingListBook.list_id == reading_list.id,
                            ReadingListBook.position == entry.position,
                        )
                    ).first()
                    if taken is not None:
                        return Result.fail(
                            ErrorKind.VALIDATION_ERROR,
                            f"Position {entry.position} is already used in this list",
                        )
                    final_position = entry.position

                db_entry = ReadingListBook(
                    list_id=reading_list.id,
                    book_id=entry.book_id,
                    position=final_position,
                )
                session.add(db_entry)
                session.flush()

                response = ListBookResponse.model_validate(db_entry)
        except IntegrityError as exc:
            return integrity_failure(exc)

        logger.debug(
            "Added book %s to list %s at position %d",
            response.book_id, response.list_id, response.position,
        )
        return Result.ok(response)

    def remove_membership(
        self, owner_id: Optional[str], list_id: Identifier, book_id: Identifier
    ) -> Result[None]:
        """Remove a book from a list. Remaining positions are left as they are."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        with self.db.get_session() as session:
            loaded = load_owned_list(session, owner_id, list_id)
            if not loaded:
                return loaded

            entry = find_membership(session, list_id, book_id)
            if entry is None:
                return Result.fail(ErrorKind.NOT_FOUND, "Book is not in this reading list")

            session.delete(entry)

        logger.debug("Removed book %s from list %s", book_id, list_id)
        return Result.ok()

    def update_notes(
        self,
        owner_id: Optional[str],
        list_id: Identifier,
        book_id: Identifier,
        notes: Optional[str],
    ) -> Result[ListBookResponse]:
        """Set the notes on a membership. Blank notes are stored as absent."""
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        try:
            payload = NotesUpdate(notes=notes)
        except ValidationError as exc:
            return validation_failure(exc)

        with self.db.get_session() as session:
            loaded = load_owned_list(session, owner_id, list_id)
            if not loaded:
                return loaded

            entry = find_membership(session, list_id, book_id)
            if entry is None:
                return Result.fail(ErrorKind.NOT_FOUND, "Book is not in this reading list")

            entry.notes = payload.notes
            session.flush()

            return Result.ok(ListBookResponse.model_validate(entry))
