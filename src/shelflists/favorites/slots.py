"""Translation between favorite slots (1-6) and stored list positions.

A favorite in slot ``s`` is stored at ``position = s * SLOT_SPACING``.
This is the only place the conversion happens.
"""

from ..lists.schemas import FAVORITES_CAPACITY

SLOT_SPACING = 100
MIN_SLOT = 1
MAX_SLOT = FAVORITES_CAPACITY


def is_valid_slot(slot) -> bool:
    return (
        isinstance(slot, int)
        and not isinstance(slot, bool)
        and MIN_SLOT <= slot <= MAX_SLOT
    )


def slot_to_position(slot: int) -> int:
    if not is_valid_slot(slot):
        raise ValueError(f"Slot must be an integer between {MIN_SLOT} and {MAX_SLOT}")
    return slot * SLOT_SPACING


def position_to_slot(position: int) -> int:
    """Slot for a stored position.

    Exact for positions written by the favorites manager. Positions set
    through the plain membership API may not be multiples of the spacing
    and are truncated.
    """
    return position // SLOT_SPACING
