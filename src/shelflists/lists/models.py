"""SQLAlchemy models for reading lists.

Tables:
- reading_lists: Owner-created reading lists, including favorites lists
- reading_list_books: Books in reading lists, ordered by position

Favorites uniqueness is held by partial unique indexes and favorites
capacity by a SQLite trigger, so concurrent writers that both pass the
application-level checks still cannot break either invariant.
"""

from typing import Optional

from sqlalchemy import (
    DDL,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..db.models import Base, generate_uuid, utc_now
from ..errors import (
    BOOK_LIST_CONSTRAINT,
    CAPACITY_TRIGGER,
    CAPACITY_TRIGGER_MESSAGE,
    FAVORITES_ALL_INDEX,
    FAVORITES_YEAR_INDEX,
)
from .schemas import FAVORITES_CAPACITY, ListType, ListVisibility


class ReadingList(Base):
    """Owner-created reading list."""

    __tablename__ = "reading_lists"
    __table_args__ = (
        Index(
            FAVORITES_ALL_INDEX,
            "owner_id",
            unique=True,
            sqlite_where=text("list_type = 'favorites_all'"),
            postgresql_where=text("list_type = 'favorites_all'"),
        ),
        Index(
            FAVORITES_YEAR_INDEX,
            "owner_id",
            "year",
            unique=True,
            sqlite_where=text("list_type = 'favorites_year'"),
            postgresql_where=text("list_type = 'favorites_year'"),
        ),
        Index("ix_reading_lists_type_year", "list_type", "year"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    # Owning principal, immutable
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # List information
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    cover_image: Mapped[Optional[str]] = mapped_column(Text)

    visibility: Mapped[str] = mapped_column(
        String(20), default=ListVisibility.PRIVATE.value, index=True
    )

    # Type and year are fixed at creation
    list_type: Mapped[str] = mapped_column(String(20), default=ListType.STANDARD.value)
    year: Mapped[Optional[str]] = mapped_column(String(10))

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utc_now)
    updated_at: Mapped[str] = mapped_column(String(32), default=utc_now, onupdate=utc_now)

    def __repr__(self) -> str:
        return f"<ReadingList(id={self.id}, title='{self.title}', type={self.list_type})>"

    @property
    def is_favorites(self) -> bool:
        """Check if this list is capped at six ranked slots."""
        return self.list_type in (ListType.FAVORITES_ALL.value, ListType.FAVORITES_YEAR.value)

    @property
    def type_display(self) -> str:
        """Get display string for list type."""
        types = {
            ListType.STANDARD.value: "Standard",
            ListType.FAVORITES_ALL.value: "All-Time Favorites",
            ListType.FAVORITES_YEAR.value: f"Favorites {self.year}",
        }
        return types.get(self.list_type, "Standard")


class ReadingListBook(Base):
    """Book in a reading list with position."""

    __tablename__ = "reading_list_books"
    __table_args__ = (
        UniqueConstraint("book_id", "list_id", name=BOOK_LIST_CONSTRAINT),
        Index("ix_reading_list_books_list_position", "list_id", "position"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    # Foreign keys
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("reading_lists.id", ondelete="CASCADE"), nullable=False
    )
    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Position in list, ascending
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Optional note about why this book is in the list
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Date added to list
    added_at: Mapped[str] = mapped_column(String(32), default=utc_now)

    def __repr__(self) -> str:
        return (
            f"<ReadingListBook(list_id={self.list_id}, book_id={self.book_id}, "
            f"position={self.position})>"
        )


_favorites_capacity_trigger = DDL(
    f"""
CREATE TRIGGER IF NOT EXISTS {CAPACITY_TRIGGER}
BEFORE INSERT ON reading_list_books
WHEN (
    SELECT list_type FROM reading_lists WHERE id = NEW.list_id
) IN ('{ListType.FAVORITES_ALL.value}', '{ListType.FAVORITES_YEAR.value}')
AND (
    SELECT COUNT(*) FROM reading_list_books WHERE list_id = NEW.list_id
) >= {FAVORITES_CAPACITY}
BEGIN
    SELECT RAISE(ABORT, '{CAPACITY_TRIGGER_MESSAGE}');
END
"""
)

event.listen(
    ReadingListBook.__table__,
    "after_create",
    _favorites_capacity_trigger.execute_if(dialect="sqlite"),
)
