"""Lookups shared by the list, membership, reorder and favorites managers.

Each helper runs inside the caller's session and returns a ``Result`` so
that missing records and foreign ownership surface as structured failures.
"""

from typing import Optional, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import Book
from ..results import ErrorKind, Result
from .models import ReadingList, ReadingListBook
from .schemas import ListType

Identifier = Union[UUID, str]


def clean_owner(owner_id: Optional[str]) -> Optional[str]:
    """Normalize an owner id; blank means unauthenticated."""
    if owner_id is None:
        return None
    owner_id = str(owner_id).strip()
    return owner_id or None


def load_owned_list(
    session: Session, owner_id: str, list_id: Identifier
) -> Result[ReadingList]:
    reading_list = session.get(ReadingList, str(list_id))
    if reading_list is None:
        return Result.fail(ErrorKind.NOT_FOUND, "Reading list not found")
    if reading_list.owner_id != owner_id:
        return Result.fail(
            ErrorKind.OWNERSHIP_ERROR, "Unauthorized - you don't own this reading list"
        )
    return Result.ok(reading_list)


def load_owned_book(session: Session, owner_id: str, book_id: Identifier) -> Result[Book]:
    book = session.get(Book, str(book_id))
    if book is None:
        return Result.fail(ErrorKind.NOT_FOUND, "Book not found")
    if book.owner_id != owner_id:
        return Result.fail(ErrorKind.OWNERSHIP_ERROR, "Unauthorized - you don't own this book")
    return Result.ok(book)


def find_membership(
    session: Session, list_id: Identifier, book_id: Identifier
) -> Optional[ReadingListBook]:
    stmt = select(ReadingListBook).where(
        ReadingListBook.list_id == str(list_id),
        ReadingListBook.book_id == str(book_id),
    )
    return session.execute(stmt).scalar_one_or_none()


def count_members(session: Session, list_id: Identifier) -> int:
    stmt = select(func.count(ReadingListBook.id)).where(
        ReadingListBook.list_id == str(list_id)
    )
    return session.execute(stmt).scalar_one()


def find_favorites_list(
    session: Session, owner_id: str, year: Optional[str]
) -> Optional[ReadingList]:
    """Find the owner's favorites_year(year) list, or favorites_all when year is None."""
    stmt = select(ReadingList).where(ReadingList.owner_id == owner_id)
    if year:
        stmt = stmt.where(
            ReadingList.list_type == ListType.FAVORITES_YEAR.value,
            ReadingList.year == year,
        )
    else:
        stmt = stmt.where(ReadingList.list_type == ListType.FAVORITES_ALL.value)
    return session.execute(stmt).scalars().first()
