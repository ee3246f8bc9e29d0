"""Collector states and the bit layout of an object's mark byte.

Bit 0 and 1: white (two shades); bit 2: black; bit 3: finalized userdata
or weak keys; bit 4: weak values; bit 5: fixed; bit 6: super fixed.
"""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "GCState",
    "WHITE0BIT",
    "WHITE1BIT",
    "BLACKBIT",
    "FINALIZEDBIT",
    "KEYWEAKBIT",
    "VALUEWEAKBIT",
    "FIXEDBIT",
    "SFIXEDBIT",
    "WHITEBITS",
    "bitmask",
    "bit2mask",
    "is_white",
    "is_black",
    "is_gray",
    "other_white",
    "is_dead",
    "change_white",
    "gray_to_black",
    "current_white_bits",
]


class GCState(IntEnum):
    """Phases of an incremental collection cycle."""

    PAUSE = 0
    PROPAGATE = 1
    SWEEPSTRING = 2
    SWEEP = 3
    FINALIZE = 4


WHITE0BIT = 0
WHITE1BIT = 1
BLACKBIT = 2
FINALIZEDBIT = 3
KEYWEAKBIT = 3
VALUEWEAKBIT = 4
FIXEDBIT = 5
SFIXEDBIT = 6


def bitmask(b: int) -> int:
    """Mask with only bit ``b`` set."""
    return 1 << b


def bit2mask(b1: int, b2: int) -> int:
    """Mask with bits ``b1`` and ``b2`` set."""
    return bitmask(b1) | bitmask(b2)


WHITEBITS = bit2mask(WHITE0BIT, WHITE1BIT)


def is_white(marked: int) -> bool:
    return bool(marked & WHITEBITS)


def is_black(marked: int) -> bool:
    return bool(marked & bitmask(BLACKBIT))


def is_gray(marked: int) -> bool:
    return not is_black(marked) and not is_white(marked)


def other_white(current_white: int) -> int:
    """The current-white value with both white shades flipped."""
    return current_white ^ WHITEBITS


def is_dead(current_white: int, marked: int) -> bool:
    """True if the object carries the white shade of the previous cycle."""
    return bool(marked & other_white(current_white) & WHITEBITS)


def change_white(marked: int) -> int:
    return (marked ^ WHITEBITS) & 0xFF


def gray_to_black(marked: int) -> int:
    return marked | bitmask(BLACKBIT)


def current_white_bits(current_white: int) -> int:
    """The white shade that new objects are marked with."""
    return current_white & WHITEBITS & 0xFF