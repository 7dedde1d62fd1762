"""Ranked favorite books, all-time and per year."""

from .manager import FavoritesManager, favorites_title
from .schemas import FavoriteBook
from .slots import SLOT_SPACING, position_to_slot, slot_to_position

__all__ = [
    "FavoritesManager",
    "FavoriteBook",
    "favorites_title",
    "SLOT_SPACING",
    "position_to_slot",
    "slot_to_position",
]
