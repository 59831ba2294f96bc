"""
Capture Rule - Which pile a full waterhole slot scares away.

When a slot reaches three or more cards it chases the nearest lower-ranked
non-empty slot. The Mouse is the exception: it ignores everything but the
Elephant. Exactly one slot is captured per trigger, always in full.
"""

from __future__ import annotations

from ..game.animals import LOWEST_RANK, HIGHEST_RANK
from .state import Board

CAPTURE_THRESHOLD = 3


def find_capture_target(rank: int, board: Board) -> int | None:
    """
    Rank of the slot that `rank` would capture, or None.

    Only looks at the board; the caller decides whether the
    acting slot has reached the threshold.
    """
    if rank == LOWEST_RANK:
        if board[HIGHEST_RANK - 1]:
            return int(HIGHEST_RANK)
        return None

    for target in range(rank - 1, LOWEST_RANK - 1, -1):
        if board[target - 1]:
            return target
    return None


def would_capture(rank: int, board: Board, adding: int) -> bool:
    """True if playing `adding` cards of `rank` triggers a capture."""
    if len(board[rank - 1]) + adding < CAPTURE_THRESHOLD:
        return False
    return find_capture_target(rank, board) is not None
