"""
Engine Core - Deterministic match state management and turn resolution.

The engine is the runtime that:
1. Holds the immutable MatchState
2. Generates legal moves
3. Applies moves via the reducer
4. Resolves waterhole captures
"""

from .state import MatchState, MatchStatus, PlayerState, Card, LogEntry, LogType
from .action import Action, ActionType, ActionResult, InvalidMoveError, MoveErrorCode
from .capture import find_capture_target, would_capture, CAPTURE_THRESHOLD
from .reducer import Reducer, apply_move, determine_winner
from .action_generator import ActionGenerator, legal_actions

__all__ = [
    "MatchState",
    "MatchStatus",
    "PlayerState",
    "Card",
    "LogEntry",
    "LogType",
    "Action",
    "ActionType",
    "ActionResult",
    "InvalidMoveError",
    "MoveErrorCode",
    "find_capture_target",
    "would_capture",
    "CAPTURE_THRESHOLD",
    "Reducer",
    "apply_move",
    "determine_winner",
    "ActionGenerator",
    "legal_actions",
]
