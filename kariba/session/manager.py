"""
Session Manager - Creates and manages match sessions.

LIFECYCLE:
1. User starts a match -> create in-memory session (deck dealt, bots seated)
2. During the match:
   - Human submits the cards to play
   - Engine validates and resolves the move
   - Engine runs bot turns until the human is up again
3. Match ends -> result saved to the history store (if a user is logged in)
4. Session is ended (finished or abandoned) and dropped from memory

Match state is never persisted; only finished-match records are.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import time
import uuid

from ..config import EngineConfig, DEFAULT_CONFIG
from ..engine_core.state import MatchState
from ..game.setup import initialize_match, HUMAN_PLAYER_ID
from ..bots import BotPolicy, KaribaBot

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a match session."""
    ACTIVE = "active"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class Session:
    """
    An in-memory match session.

    Contains:
    - Current canonical match state, plus every earlier state for replay
    - Bots for the computer seats
    - The logged-in user (if any) who gets the history record
    """
    session_id: str
    match_state: MatchState
    created_at: float
    config: EngineConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    state: SessionState = SessionState.ACTIVE
    bots: dict[str, BotPolicy] = field(default_factory=dict)
    human_player_id: str = HUMAN_PLAYER_ID
    username: str | None = None

    states: list[MatchState] = field(default_factory=list)
    turn_started_at: float = 0.0
    record_saved: bool = False

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def is_human_turn(self) -> bool:
        """Check if it's the human player's turn."""
        if self.match_state.is_finished:
            return False
        return self.match_state.current_player.player_id == self.human_player_id

    def record_state(self, new_state: MatchState) -> None:
        """Make new_state current, keeping the previous one in history."""
        self.states.append(new_state)
        self.match_state = new_state


class SessionManager:
    """
    Manages match sessions.

    Responsibilities:
    - Create sessions (deal a match, seat bots)
    - Track active sessions
    - Clean up ended and stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        human_name: str = "",
        seed: int | None = None,
        username: str | None = None,
        bots: dict[str, BotPolicy] | None = None,
    ) -> Session:
        """
        Create a new match session.

        Args:
            human_name: Display name for the human seat
            seed: Seed for the shuffle (random when None)
            username: Logged-in user who owns the match history
            bots: Policies per bot seat (KaribaBot for any seat not given)

        Returns:
            New active Session, human to move
        """
        session_id = str(uuid.uuid4())
        now = time.time()
        match_state = initialize_match(
            human_name,
            rng=random.Random(seed),
            config=self.config,
            match_id=session_id,
            now=now,
        )

        seat_bots: dict[str, BotPolicy] = {}
        for player in match_state.players:
            if player.is_human:
                continue
            seat_bots[player.player_id] = (bots or {}).get(
                player.player_id, KaribaBot(player_id=player.player_id)
            )

        session = Session(
            session_id=session_id,
            match_state=match_state,
            created_at=now,
            config=self.config,
            bots=seat_bots,
            username=username,
            states=[match_state],
            turn_started_at=now,
        )
        self._sessions[session_id] = session
        logger.info("Created session %s for %s", session_id, username or "guest")
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Ending an unfinished match marks it abandoned; any bot move still
        pending for it is discarded by the game loop.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        if session.match_state.is_finished:
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions older than max_age that are no longer being played.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
