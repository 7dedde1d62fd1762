"""Pydantic schemas for book data."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class BookCreate(BaseModel):
    """Schema for creating a new book."""

    owner_id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=500, description="Book title")
    author: str = Field(..., min_length=1, max_length=500, description="Primary author")
    isbn: Optional[str] = Field(None, max_length=13)
    cover: Optional[str] = Field(None, description="Cover image URL")

    @field_validator("owner_id", "title", "author", mode="before")
    @classmethod
    def strip_required(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("isbn", mode="before")
    @classmethod
    def clean_isbn(cls, v: Optional[str]) -> Optional[str]:
        """Strip hyphens and spaces from ISBN values."""
        if v is None:
            return None
        v = str(v).replace("-", "").replace(" ", "").strip()
        return v if v else None


class BookResponse(BaseModel):
    """Schema for book response."""

    id: UUID
    owner_id: str
    title: str
    author: str
    isbn: Optional[str]
    cover: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
