"""SQLAlchemy ORM models for local SQLite database.

Tables:
- books: Book records owned by a principal

Reading list tables live in lists/models.py and register with the same Base.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid4())


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Book(Base):
    """Book owned by a single principal. Lists reference it, never modify it."""

    __tablename__ = "books"

    # Primary key
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    # Owning principal
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Core fields
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    isbn: Mapped[Optional[str]] = mapped_column(String(13), index=True)
    cover: Mapped[Optional[str]] = mapped_column(Text)  # URL

    # Timestamps
    created_at: Mapped[str] = mapped_column(String(32), default=utc_now)

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', owner={self.owner_id})>"
