"""Whole-list reordering.

A reorder replaces every position in a list at once. The caller supplies
the complete new order; partial orders are refused rather than merged.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import select

from ..db.sqlite import Database
from ..errors import unauthenticated
from ..results import ErrorKind, Result
from .access import Identifier, clean_owner, load_owned_list
from .models import ReadingListBook

logger = logging.getLogger(__name__)

# Spacing of renumbered positions: 100, 200, 300, ...
REORDER_SPACING = 100


class ListReorderer:
    """Applies a full permutation to a list's memberships."""

    def __init__(self, db: Database):
        self.db = db

    def reorder_memberships(
        self,
        owner_id: Optional[str],
        list_id: Identifier,
        ordered_book_ids: Sequence[Identifier],
    ) -> Result[None]:
        """Renumber a list so its books follow ``ordered_book_ids``.

        ``ordered_book_ids`` must be a permutation of the list's current
        books. Every position is rewritten inside one transaction, so a
        failure part way leaves the old order intact.

        Args:
            owner_id: Acting principal
            list_id: List UUID
            ordered_book_ids: Every book in the list, in the new order

        Returns:
            Empty successful result, or InvalidMembers / IncompleteReorder
        """
        owner_id = clean_owner(owner_id)
        if owner_id is None:
            return unauthenticated()

        requested = [str(book_id) for book_id in ordered_book_ids]

        with self.db.get_session() as session:
            loaded = load_owned_list(session, owner_id, list_id)
            if not loaded:
                return loaded

            entries = {
                entry.book_id: entry
                for entry in session.execute(
                    select(ReadingListBook).where(
                        ReadingListBook.list_id == loaded.data.id
                    )
                ).scalars()
            }

            unknown = [book_id for book_id in requested if book_id not in entries]
            if unknown:
                return Result.fail(
                    ErrorKind.INVALID_MEMBERS,
                    "Some book IDs are not in this reading list: " + ", ".join(unknown),
                )

            if len(requested) != len(entries) or len(set(requested)) != len(entries):
                return Result.fail(
                    ErrorKind.INCOMPLETE_REORDER,
                    "Must provide all books in the list exactly once for reordering",
                )

            for index, book_id in enumerate(requested):
                entries[book_id].position = (index + 1) * REORDER_SPACING
            session.flush()

        logger.debug("Reordered %d books in list %s", len(requested), list_id)
        return Result.ok()
