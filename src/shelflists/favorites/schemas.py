"""Pydantic schemas for favorite books."""

from typing import Optional

from pydantic import BaseModel

from ..db.schemas import BookResponse


class FavoriteBook(BaseModel):
    """A book in a favorites list and the slot it occupies."""

    book: BookResponse
    slot: int
    position: int
    notes: Optional[str] = None
