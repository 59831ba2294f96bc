"""
History Models - Accounts and completed-match records.

All models are plain dataclasses that convert to and from JSON-ready dicts.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, TYPE_CHECKING
import time

if TYPE_CHECKING:
    from ..engine_core.state import MatchState


@dataclass(frozen=True)
class UserAccount:
    """A registered user, as returned to callers (no credentials)."""
    username: str
    email: str
    created_at: float


@dataclass(frozen=True)
class AuthResult:
    """
    Outcome of register/authenticate.

    On failure `message` says why (never a generic fault).
    """
    success: bool
    message: str
    user: UserAccount | None = None

    @classmethod
    def failed(cls, message: str) -> AuthResult:
        return cls(success=False, message=message)


@dataclass
class PlayerRecord:
    """One player's line in a finished match."""
    name: str
    score: int
    rank: int
    time_used: float
    is_human: bool


@dataclass
class MatchRecord:
    """
    A completed match.

    duration and time_used are in seconds; completed_at is a unix timestamp.
    """
    match_id: str
    completed_at: float
    duration: float
    winner_name: str
    players: list[PlayerRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchRecord:
        return cls(
            match_id=data["match_id"],
            completed_at=data["completed_at"],
            duration=data["duration"],
            winner_name=data["winner_name"],
            players=[PlayerRecord(**p) for p in data.get("players", [])],
        )


def build_match_record(state: MatchState, completed_at: float | None = None) -> MatchRecord:
    """
    Summarise a finished match.

    Players are ranked by score, highest first; equal scores keep seat order.
    """
    if not state.is_finished:
        raise ValueError(f"Match {state.match_id} is not finished")

    finished = time.time() if completed_at is None else completed_at
    ranked = sorted(state.players, key=lambda p: p.score, reverse=True)
    winner = state.winner

    return MatchRecord(
        match_id=state.match_id,
        completed_at=finished,
        duration=max(0.0, finished - state.started_at),
        winner_name=winner.name if winner else "",
        players=[
            PlayerRecord(
                name=p.name,
                score=p.score,
                rank=position,
                time_used=p.time_used,
                is_human=p.is_human,
            )
            for position, p in enumerate(ranked, start=1)
        ],
    )
