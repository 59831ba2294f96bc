"""
Session Module - Manages in-memory match sessions.

A session represents one play-through of a match:
- Created when a user starts a match
- Holds the current match state and every earlier state
- Runs bot turns between human moves
- Ended when the match finishes or is abandoned

Only the finished-match record outlives a session (see kariba.history).
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
