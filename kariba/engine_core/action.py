"""
Action System - Moves, results and move errors.

Kariba has a single kind of player action: play one or more cards of a
single rank from hand onto the waterhole. All state changes flow through
actions so they can be logged and replayed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from .state import Card


class ActionType(Enum):
    """Types of actions in the system."""
    PLAY_CARDS = "play_cards"


class MoveErrorCode(str, Enum):
    """Why a move was rejected."""
    MATCH_FINISHED = "MATCH_FINISHED"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    EMPTY_SELECTION = "EMPTY_SELECTION"
    MIXED_RANKS = "MIXED_RANKS"
    CARDS_NOT_IN_HAND = "CARDS_NOT_IN_HAND"


class InvalidMoveError(ValueError):
    """
    A move violated the resolver's preconditions.

    Raised instead of applying anything; the state the move was aimed at
    is left untouched.
    """

    def __init__(self, message: str, error_code: MoveErrorCode):
        super().__init__(message)
        self.error_code = error_code


@dataclass(frozen=True)
class Action:
    """
    A complete move to be applied to the match state.

    Actions are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    player_id: str
    cards: tuple[Card, ...] = ()

    @classmethod
    def play(cls, player_id: str, cards: Iterable[Card]) -> Action:
        """Factory for a play-cards action."""
        return cls(
            action_type=ActionType.PLAY_CARDS,
            player_id=player_id,
            cards=tuple(cards),
        )

    @property
    def rank(self) -> int | None:
        """Rank of the played cards, or None for an empty selection."""
        return self.cards[0].rank if self.cards else None


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action succeeded
    - New state (if succeeded)
    - Error and error code (if failed)
    - Human-readable changes for presentation
    """
    success: bool
    new_state: Any | None = None  # MatchState
    error: str | None = None
    error_code: MoveErrorCode | None = None

    state_changes: list[str] = field(default_factory=list)
    captured: tuple[Card, ...] = ()

    @classmethod
    def failure(cls, error: str, error_code: MoveErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        captured: tuple[Card, ...] = (),
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            captured=captured,
        )
