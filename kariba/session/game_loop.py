"""
Game Loop - Drives one match session move by move.

The loop:
1. Human submits the ids of the cards to play
2. Engine validates and resolves the move
3. Engine runs bot turns until the human is up (or the match ends)
4. Presentation reads the new snapshot and log
5. Repeat

Moves are resolved one at a time. The reducer rejects any move from a seat
that is not on turn, so a late human intent can never interleave with a
bot move.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, TYPE_CHECKING
import asyncio
import logging
import time

from ..engine_core.action import Action, ActionResult, MoveErrorCode
from ..engine_core.action_generator import legal_actions
from ..engine_core.reducer import Reducer
from ..history.models import build_match_record
from .manager import SessionState

if TYPE_CHECKING:
    from .manager import Session
    from ..history.service import HistoryService

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    WAITING_HUMAN_ACTION = "waiting_human_action"
    RUNNING_BOTS = "running_bots"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


@dataclass
class TurnResult:
    """
    Result of processing a move (and any bot replies).

    Contains what changed, which bot moves were made and any
    errors or warnings for the presentation layer.
    """
    success: bool
    loop_state: LoopState

    state_changes: list[str] = field(default_factory=list)
    bot_actions: list[str] = field(default_factory=list)

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_code: MoveErrorCode | None = None

    winner: str | None = None


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session, history=HistoryService(store))

        result = loop.submit_human_move(["zebra_3", "zebra_5"])
        if not result.success:
            show_errors(result.errors)

        # Or with presentation pacing
        result = await loop.run_bot_turns_paced(delay=1.5)
    """

    def __init__(
        self,
        session: Session,
        history: HistoryService | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.session = session
        self.history = history
        self.clock = clock
        self.reducer = Reducer(config=session.config)
        self.state = self._current_loop_state()

    def submit_human_move(self, card_ids: Iterable[str], run_bots: bool = True) -> TurnResult:
        """
        Resolve the human's chosen cards, then let the bots reply.

        Unknown ids, repeated ids or mixed animals are rejected
        without touching the match state.
        """
        if self.session.match_state.is_finished:
            return self._failure(
                "Match is over - no moves allowed",
                error_code=MoveErrorCode.MATCH_FINISHED,
            )
        if not self.session.is_active():
            return self._failure("Session is no longer active")

        match_state = self.session.match_state
        human = match_state.get_player(self.session.human_player_id)
        cards = human.find_cards(card_ids) if human else None
        if cards is None:
            return self._failure(
                "Selected cards are not in hand",
                error_code=MoveErrorCode.CARDS_NOT_IN_HAND,
            )

        result = self._apply(Action.play(self.session.human_player_id, cards))
        if not result.success:
            return self._failure(result.error, error_code=result.error_code)

        turn = TurnResult(
            success=True,
            loop_state=self._current_loop_state(),
            state_changes=list(result.state_changes),
        )
        if run_bots:
            turn = self._merge(turn, self.run_bot_turns())
        return self._finalize(turn)

    def run_bot_turns(self) -> TurnResult:
        """Run bot turns until it's the human's turn again or the match ends."""
        turn = TurnResult(success=True, loop_state=LoopState.RUNNING_BOTS)
        while self._bot_on_turn():
            if not self._play_bot_move(turn):
                break
        turn.loop_state = self._current_loop_state()
        return self._finalize(turn)

    async def run_bot_turns_paced(self, delay: float | None = None) -> TurnResult:
        """
        Like run_bot_turns, but wait `delay` seconds before each bot move.

        The wait is for presentation only. If the task is cancelled or the
        session is ended during the wait, the pending bot move is dropped
        and the match state stays as it was.
        """
        pause = self.session.config.bot_delay_seconds if delay is None else delay
        turn = TurnResult(success=True, loop_state=LoopState.RUNNING_BOTS)
        while self._bot_on_turn():
            await asyncio.sleep(pause)
            if not self.session.is_active():
                logger.info("Session %s ended, dropping pending bot move", self.session.session_id)
                break
            if not self._play_bot_move(turn):
                break
        turn.loop_state = self._current_loop_state()
        return self._finalize(turn)

    def _bot_on_turn(self) -> bool:
        if not self.session.is_active() or self.session.match_state.is_finished:
            return False
        current = self.session.match_state.current_player
        return current.player_id in self.session.bots

    def _play_bot_move(self, turn: TurnResult) -> bool:
        """Ask the bot on turn for a move and apply it. False stops the loop."""
        match_state = self.session.match_state
        player = match_state.current_player
        bot = self.session.bots[player.player_id]

        decision = bot.select_action(match_state, legal_actions(match_state))
        result = self._apply(decision.action)
        if not result.success:
            # Bots pick from the legal moves, so this is a bug in the policy
            logger.error(
                "Bot %s made an illegal move: %s", player.player_id, result.error
            )
            turn.success = False
            turn.errors.append(f"{player.name}: {result.error}")
            return False

        logger.debug("%s: %s", player.name, decision.explanation)
        turn.bot_actions.append(f"{player.name}: {decision.explanation}")
        turn.state_changes.extend(result.state_changes)
        return True

    def _apply(self, action: Action) -> ActionResult:
        """Apply one move through the reducer and record the new state."""
        now = self.clock()
        elapsed = max(0.0, now - self.session.turn_started_at)
        result = self.reducer.apply(self.session.match_state, action, elapsed=elapsed, now=now)
        if not result.success:
            return result

        self.session.record_state(result.new_state)
        self.session.turn_started_at = now
        if result.new_state.is_finished:
            self._on_finished(now)
        self.state = self._current_loop_state()
        return result

    def _on_finished(self, now: float) -> None:
        """Close the session and save the match record (best effort)."""
        session = self.session
        session.state = SessionState.GAME_OVER
        winner = session.match_state.winner
        logger.info(
            "Match %s finished, winner %s", session.session_id, winner.name if winner else None
        )
        if not self.history or not session.username:
            return
        record = build_match_record(session.match_state, completed_at=now)
        session.record_saved = self.history.save(session.username, record)

    def _finalize(self, turn: TurnResult) -> TurnResult:
        """Attach game-over info and history warnings."""
        match_state = self.session.match_state
        if match_state.is_finished:
            turn.loop_state = LoopState.GAME_OVER
            winner = match_state.winner
            turn.winner = winner.player_id if winner else None
            if self.history and self.session.username and not self.session.record_saved:
                warning = "Match history could not be saved"
                if warning not in turn.warnings:
                    turn.warnings.append(warning)
        return turn

    def _merge(self, first: TurnResult, second: TurnResult) -> TurnResult:
        return TurnResult(
            success=first.success and second.success,
            loop_state=second.loop_state,
            state_changes=first.state_changes + second.state_changes,
            bot_actions=first.bot_actions + second.bot_actions,
            errors=first.errors + second.errors,
            warnings=first.warnings + second.warnings,
        )

    def _failure(self, error: str, error_code: MoveErrorCode | None = None) -> TurnResult:
        return TurnResult(
            success=False,
            loop_state=self._current_loop_state(),
            errors=[error],
            error_code=error_code,
        )

    def _current_loop_state(self) -> LoopState:
        if self.session.match_state.is_finished:
            return LoopState.GAME_OVER
        if self.session.state == SessionState.ABANDONED:
            return LoopState.ABANDONED
        if self.session.is_human_turn():
            return LoopState.WAITING_HUMAN_ACTION
        return LoopState.RUNNING_BOTS
