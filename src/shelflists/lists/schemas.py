"""Pydantic schemas for reading lists and their memberships."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

TITLE_MAX_LENGTH = 200
TEXT_MAX_LENGTH = 2000

# Hard cap on books in any favorites list
FAVORITES_CAPACITY = 6

# Largest position a membership may hold (signed 32-bit INTEGER)
MAX_POSITION = 2**31 - 1


class ListType(str, Enum):
    """Type of reading list."""

    STANDARD = "standard"
    FAVORITES_ALL = "favorites_all"
    FAVORITES_YEAR = "favorites_year"

    @property
    def is_favorites(self) -> bool:
        return self in (ListType.FAVORITES_ALL, ListType.FAVORITES_YEAR)


class ListVisibility(str, Enum):
    """Who may see a reading list."""

    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _strip_or_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class ReadingListCreate(BaseModel):
    """Schema for creating a reading list."""

    owner_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=TEXT_MAX_LENGTH)
    visibility: ListVisibility = ListVisibility.PRIVATE
    list_type: ListType = ListType.STANDARD
    year: Optional[str] = Field(None, max_length=10)

    @field_validator("owner_id", "title", mode="before")
    @classmethod
    def strip_required(cls, v):
        return _strip(v)

    @field_validator("description", "year", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _strip_or_none(v)

    @model_validator(mode="after")
    def check_year_matches_type(self) -> "ReadingListCreate":
        if self.list_type == ListType.FAVORITES_YEAR and not self.year:
            raise ValueError("Year is required for favorites_year lists")
        if self.list_type != ListType.FAVORITES_YEAR and self.year:
            raise ValueError("Year can only be set on favorites_year lists")
        return self


class ReadingListUpdate(BaseModel):
    """Schema for updating a reading list. Type and year are not updatable."""

    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=TEXT_MAX_LENGTH)
    visibility: Optional[ListVisibility] = None
    cover_image: Optional[str] = Field(None, max_length=TEXT_MAX_LENGTH)

    @field_validator("title", "description", "cover_image", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v:
            raise ValueError("Title cannot be empty")
        return v


class ReadingListResponse(BaseModel):
    """Schema for reading list response."""

    id: UUID
    owner_id: str
    title: str
    description: Optional[str]
    visibility: ListVisibility
    list_type: ListType
    year: Optional[str]
    cover_image: Optional[str]
    type_display: str
    is_favorites: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReadingListSummary(BaseModel):
    """Summary of a reading list for listing."""

    id: UUID
    title: str
    list_type: ListType
    type_display: str
    visibility: ListVisibility
    year: Optional[str]
    book_count: int
    updated_at: datetime


class MembershipCreate(BaseModel):
    """Schema for adding a book to a list."""

    book_id: str = Field(..., min_length=1)
    position: Optional[int] = Field(None, ge=0, le=MAX_POSITION, strict=True)


class NotesUpdate(BaseModel):
    """Schema for a membership's notes."""

    notes: Optional[str] = Field(None, max_length=TEXT_MAX_LENGTH)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _strip_or_none(v)


class ListBookResponse(BaseModel):
    """Schema for list book response."""

    id: UUID
    list_id: UUID
    book_id: UUID
    position: int
    notes: Optional[str]
    added_at: datetime

    model_config = {"from_attributes": True}


class ListBookWithDetails(ListBookResponse):
    """List book entry with book details."""

    book_title: Optional[str]
    book_author: Optional[str]
    book_cover: Optional[str]


class ReadingListWithBooks(BaseModel):
    """Reading list with all its books."""

    list: ReadingListResponse
    books: list[ListBookWithDetails]
