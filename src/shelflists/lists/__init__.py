"""Reading lists, their ordered memberships and whole-list reordering."""

from .manager import ReadingListManager
from .membership import MembershipManager
from .models import ReadingList, ReadingListBook
from .reorder import ListReorderer
from .schemas import (
    FAVORITES_CAPACITY,
    ListBookResponse,
    ListBookWithDetails,
    ListType,
    ListVisibility,
    ReadingListCreate,
    ReadingListResponse,
    ReadingListSummary,
    ReadingListUpdate,
    ReadingListWithBooks,
)

__all__ = [
    "ReadingListManager",
    "MembershipManager",
    "ListReorderer",
    "ReadingList",
    "ReadingListBook",
    "FAVORITES_CAPACITY",
    "ListBookResponse",
    "ListBookWithDetails",
    "ListType",
    "ListVisibility",
    "ReadingListCreate",
    "ReadingListResponse",
    "ReadingListSummary",
    "ReadingListUpdate",
    "ReadingListWithBooks",
]
