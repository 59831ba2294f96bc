"""
Tests for the capture rule.

Every rank is covered explicitly, including the Mouse/Elephant wraparound.
"""

import pytest

from ..engine_core.capture import find_capture_target, would_capture
from .conftest import make_board


class TestFindCaptureTarget:
    """Which slot a full waterhole slot scares away."""

    @pytest.mark.parametrize(
        "rank, piles, expected",
        [
            # Mouse only ever takes the Elephant
            (1, {8: 2}, 8),
            (1, {8: 1, 7: 4, 2: 3}, 8),
            (1, {2: 1, 3: 1, 7: 1}, None),
            (1, {}, None),
            # Meerkat can only reach the Mouse
            (2, {1: 2}, 1),
            (2, {3: 1, 8: 1}, None),
            # Zebra
            (3, {1: 1, 2: 1}, 2),
            (3, {1: 3}, 1),
            # Giraffe
            (4, {1: 1, 3: 2}, 3),
            (4, {5: 1, 8: 1}, None),
            # Ostrich
            (5, {3: 2}, 3),
            (5, {1: 1, 4: 1}, 4),
            # Cheetah
            (6, {2: 1, 5: 1}, 5),
            (6, {1: 2}, 1),
            # Rhino
            (7, {4: 1}, 4),
            (7, {8: 3}, None),
            # Elephant never wraps around to the Mouse first
            (8, {1: 1, 7: 1}, 7),
            (8, {1: 2}, 1),
            (8, {}, None),
        ],
    )
    def test_target_per_rank(self, rank, piles, expected):
        """Nearest lower non-empty slot, Mouse takes only the Elephant."""
        board = make_board({rank: 3, **piles})
        assert find_capture_target(rank, board) == expected

    def test_own_slot_is_never_a_target(self):
        """A rank never captures itself."""
        board = make_board({4: 5})
        assert find_capture_target(4, board) is None

    def test_higher_slots_are_ignored(self):
        """Only lower ranks are eligible (except for the Mouse)."""
        board = make_board({3: 3, 4: 2, 5: 2, 8: 2})
        assert find_capture_target(3, board) is None


class TestWouldCapture:
    """Threshold plus target."""

    def test_below_threshold(self):
        """Two cards on the slot never capture."""
        board = make_board({2: 2})
        assert not would_capture(3, board, 2)

    def test_reaching_threshold_with_target(self):
        board = make_board({3: 1, 2: 2})
        assert would_capture(3, board, 2)

    def test_threshold_without_target(self):
        board = make_board({3: 2})
        assert not would_capture(3, board, 1)

    def test_mouse_wraparound(self):
        board = make_board({1: 2, 8: 1})
        assert would_capture(1, board, 1)
