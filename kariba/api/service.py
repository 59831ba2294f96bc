"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine and store calls
2. Manages sessions and their game loops
3. Builds read-only snapshots for the presentation layer

This layer is framework-agnostic (can be used with FastAPI, Flask, a CLI, etc.)
Failures are returned as ErrorResponse objects rather than raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    # Requests
    RegisterRequest,
    LoginRequest,
    CreateMatchRequest,
    PlayCardsRequest,
    # Responses
    AuthResponse,
    MatchStateResponse,
    HistoryResponse,
    ErrorResponse,
    # Shared
    UserInfo,
    CardInfo,
    BoardSlotInfo,
    PlayerInfo,
    LogEntryInfo,
    MatchRecordInfo,
    PlayerRecordInfo,
    # Enums
    ErrorCode,
    SessionStatus,
)
from ..engine_core.action import MoveErrorCode
from ..engine_core.state import Card, PlayerState
from ..game.animals import Animal
from ..history import (
    HistoryService,
    InMemoryHistoryStore,
    StoreError,
    UserAccount,
    DUPLICATE_USER_MESSAGE,
)
from ..session import SessionManager, Session, SessionState, GameLoop, TurnResult

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        match = service.create_match(CreateMatchRequest(human_name="Ana"))
        card_ids = [match.hand[0].card_id]
        match = service.play_cards(match.match_id, PlayCardsRequest(card_ids=card_ids))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    history: HistoryService = field(
        default_factory=lambda: HistoryService(store=InMemoryHistoryStore())
    )

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    # =========================================================================
    # Accounts
    # =========================================================================

    def register(self, request: RegisterRequest) -> AuthResponse | ErrorResponse:
        try:
            result = self.history.store.register(request.username, request.email, request.password)
        except StoreError as e:
            return self._store_unavailable(e)

        if not result.success:
            code = (
                ErrorCode.DUPLICATE_USER
                if result.message == DUPLICATE_USER_MESSAGE
                else ErrorCode.VALIDATION_ERROR
            )
            return ErrorResponse(error=result.message, error_code=code)
        return AuthResponse(success=True, message=result.message, user=_user_info(result.user))

    def login(self, request: LoginRequest) -> AuthResponse | ErrorResponse:
        try:
            result = self.history.store.authenticate(request.username, request.password)
        except StoreError as e:
            return self._store_unavailable(e)

        if not result.success:
            return ErrorResponse(error=result.message, error_code=ErrorCode.INVALID_CREDENTIALS)
        return AuthResponse(success=True, message=result.message, user=_user_info(result.user))

    def get_history(self, username: str) -> HistoryResponse:
        """Never fails: an outage gives an empty history the client can retry."""
        view = self.history.fetch(username)
        return HistoryResponse(
            username=username,
            records=[
                MatchRecordInfo(
                    match_id=r.match_id,
                    completed_at=r.completed_at,
                    duration=r.duration,
                    winner_name=r.winner_name,
                    players=[
                        PlayerRecordInfo(
                            name=p.name,
                            score=p.score,
                            rank=p.rank,
                            time_used=p.time_used,
                            is_human=p.is_human,
                        )
                        for p in r.players
                    ],
                )
                for r in view.records
            ],
            available=view.available,
            retry=view.retry,
            message=view.message,
        )

    # =========================================================================
    # Matches
    # =========================================================================

    def create_match(self, request: CreateMatchRequest) -> MatchStateResponse:
        """Deal a new match. The human always has the first move."""
        session = self.session_manager.create_session(
            human_name=request.human_name,
            seed=request.seed,
            username=request.username,
        )
        self._game_loops[session.session_id] = GameLoop(session, history=self.history)
        return self._build_match_state(session)

    def get_match(self, match_id: str) -> MatchStateResponse | ErrorResponse:
        session = self.session_manager.get_session(match_id)
        if not session:
            return self._match_not_found(match_id)
        return self._build_match_state(session)

    def play_cards(
        self,
        match_id: str,
        request: PlayCardsRequest,
    ) -> MatchStateResponse | ErrorResponse:
        """
        Apply the human's move, then run the bots.

        This is the main game loop entry point.
        """
        session = self.session_manager.get_session(match_id)
        game_loop = self._game_loops.get(match_id)
        if not session or not game_loop:
            return self._match_not_found(match_id)

        result = game_loop.submit_human_move(request.card_ids)
        if not result.success and result.error_code is not None:
            return _move_error(result)
        if not result.success:
            logger.error("Match %s: %s", match_id, "; ".join(result.errors))
        return self._build_match_state(session, result)

    def end_match(self, match_id: str, reason: str = "user_ended") -> bool:
        """Abandon (or close) a match and release it."""
        self._game_loops.pop(match_id, None)
        return self.session_manager.end_session(match_id, reason)

    def list_matches(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _build_match_state(
        self,
        session: Session,
        turn: TurnResult | None = None,
    ) -> MatchStateResponse:
        """Build the read-only snapshot the presentation layer renders."""
        state = session.match_state
        current_id = None if state.is_finished else state.current_player.player_id
        human = state.get_player(session.human_player_id)
        winner = state.winner

        return MatchStateResponse(
            match_id=state.match_id,
            status=state.status.value,
            session_status=self._session_status(session),
            turn_number=state.turn_number,
            current_player_id=current_id,
            players=[_player_info(p, p.player_id == current_id) for p in state.players],
            board=[
                BoardSlotInfo(
                    rank=int(animal),
                    animal=animal.display_name,
                    card_count=len(state.slot(animal)),
                    cards=[_card_info(c) for c in state.slot(animal)],
                )
                for animal in Animal
            ],
            draw_pile_count=len(state.draw_pile),
            hand=[_card_info(c) for c in human.hand] if human else [],
            log=[
                LogEntryInfo(
                    entry_id=e.entry_id,
                    entry_type=e.entry_type.value,
                    message=e.message,
                    timestamp=e.timestamp,
                )
                for e in state.log
            ],
            winner=_player_info(winner, False) if winner else None,
            bot_actions=turn.bot_actions if turn else [],
            warnings=turn.warnings if turn else [],
        )

    def _session_status(self, session: Session) -> SessionStatus:
        if session.match_state.is_finished:
            return SessionStatus.GAME_OVER
        if session.state == SessionState.ABANDONED:
            return SessionStatus.ABANDONED
        if session.is_human_turn():
            return SessionStatus.YOUR_TURN
        return SessionStatus.BOTS_THINKING

    def _match_not_found(self, match_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Match {match_id} not found",
            error_code=ErrorCode.MATCH_NOT_FOUND,
        )

    def _store_unavailable(self, error: Exception) -> ErrorResponse:
        logger.warning("Account store unavailable: %s", error)
        return ErrorResponse(
            error="Account service is temporarily unavailable, please retry",
            error_code=ErrorCode.STORE_UNAVAILABLE,
        )


def _move_error(result: TurnResult) -> ErrorResponse:
    """Map a rejected move to an API error."""
    message = "; ".join(result.errors)
    if result.error_code == MoveErrorCode.MATCH_FINISHED:
        return ErrorResponse(error=message, error_code=ErrorCode.MATCH_FINISHED)
    return ErrorResponse(
        error=message,
        error_code=ErrorCode.INVALID_MOVE,
        details={"reason": result.error_code.value},
    )


def _card_info(card: Card) -> CardInfo:
    return CardInfo(
        card_id=card.card_id,
        rank=card.rank,
        animal=card.animal.display_name,
        emoji=card.animal.emoji,
    )


def _player_info(player: PlayerState, is_current_turn: bool) -> PlayerInfo:
    return PlayerInfo(
        player_id=player.player_id,
        name=player.name,
        is_human=player.is_human,
        is_current_turn=is_current_turn,
        score=player.score,
        hand_count=len(player.hand),
        time_used=player.time_used,
    )


def _user_info(user: UserAccount | None) -> UserInfo | None:
    if user is None:
        return None
    return UserInfo(username=user.username, email=user.email, created_at=user.created_at)
