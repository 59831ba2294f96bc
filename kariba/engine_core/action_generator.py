"""
Action Generator - Generates all legal moves from a match state.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to show available plays
3. Validation (is this move in legal_actions?)

Cards of one rank are interchangeable, so for each rank in hand the
generator yields one play per card count (1..k) rather than every subset.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import MatchState
from .action import Action


@dataclass
class ActionGenerator:
    """Generates legal moves for the active player."""

    def generate(self, state: MatchState) -> list[Action]:
        """
        Generate all legal moves for the current player.

        Returns a list of fully-specified Action objects,
        ordered by rank then by card count.
        """
        if state.is_finished:
            return []

        player = state.current_player
        actions = []
        for rank in sorted({c.rank for c in player.hand}):
            group = player.cards_of_rank(rank)
            for count in range(1, len(group) + 1):
                actions.append(Action.play(player.player_id, group[:count]))
        return actions


def legal_actions(state: MatchState) -> list[Action]:
    """Convenience function to generate legal moves."""
    return ActionGenerator().generate(state)
