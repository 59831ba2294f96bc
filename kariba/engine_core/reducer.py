"""
Reducer - Applies moves to match state.

The reducer is the single point of state change.
All moves must go through Reducer.apply() or apply_move().

Design principles:
- Pure function: (state, move) -> new state, the input is never modified
- Validates before applying, nothing is ever partially applied
- Returns ActionResult with success/failure

Resolution order for one move:
1. Log the play
2. Remove the cards from hand
3. Put them on the waterhole slot of their rank
4. Capture check (see capture.py)
5. Refill the hand from the draw pile
6. Termination check
7. Advance the turn, skipping empty hands
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable
import time

from ..config import EngineConfig, DEFAULT_CONFIG
from ..game.animals import animal_name
from .state import MatchState, MatchStatus, PlayerState, LogType, Card, sort_hand
from .action import Action, ActionType, ActionResult, InvalidMoveError, MoveErrorCode
from .capture import find_capture_target, CAPTURE_THRESHOLD


@dataclass
class Reducer:
    """
    Reducer applies moves to match state.

    Stateless - all state is in MatchState.
    Config provides the hand size used for refills.
    """
    config: EngineConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    def apply(
        self,
        state: MatchState,
        action: Action,
        elapsed: float = 0.0,
        now: float | None = None,
    ) -> ActionResult:
        """
        Apply a move to the match state.

        Args:
            state: Current match state (left untouched)
            action: The move to apply
            elapsed: Seconds the player spent on this move
            now: Timestamp for log entries (defaults to time.time())

        Returns ActionResult with new state or error.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            message, code = validation_error
            return ActionResult.failure(message, error_code=code)

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(f"No handler for action type: {action.action_type}")

        timestamp = time.time() if now is None else now
        result = handler(state, action, elapsed, timestamp)
        if result.success and result.new_state:
            result.new_state = result.new_state._copy_with(
                move_history=result.new_state.move_history + (action,),
            )
        return result

    def _validate_action(
        self, state: MatchState, action: Action
    ) -> tuple[str, MoveErrorCode] | None:
        """
        Validate that a move is legal in the current state.

        Returns (message, code) if invalid, None if valid.
        """
        if state.status == MatchStatus.FINISHED:
            return "Match is over - no moves allowed", MoveErrorCode.MATCH_FINISHED

        player = state.get_player(action.player_id)
        if not player:
            return f"Player {action.player_id} not found", MoveErrorCode.PLAYER_NOT_FOUND

        if action.player_id != state.current_player.player_id:
            return f"Not {action.player_id}'s turn", MoveErrorCode.NOT_YOUR_TURN

        if not action.cards:
            return "No cards selected", MoveErrorCode.EMPTY_SELECTION

        if len({c.rank for c in action.cards}) != 1:
            return "Selected cards must share one animal", MoveErrorCode.MIXED_RANKS

        if not player.holds(action.cards):
            return "Selected cards are not in hand", MoveErrorCode.CARDS_NOT_IN_HAND

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLAY_CARDS: self._handle_play_cards,
        }
        return handlers.get(action_type)

    def _handle_play_cards(
        self,
        state: MatchState,
        action: Action,
        elapsed: float,
        now: float,
    ) -> ActionResult:
        """Handle a play of one or more same-rank cards."""
        player = state.get_player(action.player_id)
        rank = action.rank
        # Hand cards, never the caller's copies
        played = player.find_cards(c.card_id for c in action.cards)
        changes: list[str] = []

        # 1. Log the play
        message = f"{player.name} played {len(played)} {animal_name(rank, len(played))}."
        new_state = state.with_log(LogType.ACTION, message, now)
        changes.append(message)

        # 2. Remove cards from hand
        played_ids = {c.card_id for c in played}
        hand = tuple(c for c in player.hand if c.card_id not in played_ids)

        # 3. Add cards to the waterhole
        slot = new_state.slot(rank) + played
        new_state = new_state.with_slot(rank, slot)

        # 4. Capture check
        captured: tuple[Card, ...] = ()
        if len(slot) >= CAPTURE_THRESHOLD:
            target = find_capture_target(rank, new_state.board)
            if target is not None:
                captured = new_state.slot(target)
                new_state = new_state.with_slot(target, ())
                message = (
                    f"{animal_name(rank, 2)} scared away "
                    f"{len(captured)} {animal_name(target, len(captured))}!"
                )
                new_state = new_state.with_log(LogType.CAPTURE, message, now)
                changes.append(message)

        # 5. Refill hand
        draw_count = max(0, min(self.config.hand_size - len(hand), len(new_state.draw_pile)))
        drawn = new_state.draw_pile[:draw_count]
        new_player = player._copy_with(
            hand=sort_hand(hand + drawn),
            captured=player.captured + captured,
            time_used=player.time_used + elapsed,
        )
        new_state = new_state.with_player(new_player)._copy_with(
            draw_pile=new_state.draw_pile[draw_count:],
        )

        # 6. Termination check
        if not new_state.draw_pile and all(not p.has_cards for p in new_state.players):
            new_state, summary = self._finish(new_state, now)
            changes.append(summary)
        else:
            # 7. Advance turn
            new_state, skipped = self._advance_turn(new_state, now)
            changes.extend(skipped)

        return ActionResult.success_with_state(new_state, changes=changes, captured=captured)

    def _finish(self, state: MatchState, now: float) -> tuple[MatchState, str]:
        """Mark the match finished and pick the winner (earliest seat wins ties)."""
        winner = determine_winner(state.players)
        message = f"Game over! Winner: {winner.name} with {winner.score} cards."
        new_state = state._copy_with(
            status=MatchStatus.FINISHED,
            winner_id=winner.player_id,
        )
        return new_state.with_log(LogType.INFO, message, now), message

    def _advance_turn(self, state: MatchState, now: float) -> tuple[MatchState, list[str]]:
        """Move to the next seat that still holds cards."""
        num_players = state.num_players
        next_idx = (state.current_player_idx + 1) % num_players
        skipped: list[str] = []

        loop_count = 0
        while not state.players[next_idx].has_cards and loop_count < num_players:
            message = f"{state.players[next_idx].name} has no cards, turn skipped."
            state = state.with_log(LogType.INFO, message, now)
            skipped.append(message)
            next_idx = (next_idx + 1) % num_players
            loop_count += 1

        new_state = state._copy_with(
            current_player_idx=next_idx,
            turn_number=state.turn_number + 1,
        )
        return new_state, skipped


def determine_winner(players: Iterable[PlayerState]) -> PlayerState:
    """Strictly highest score wins; ties go to the earliest seat."""
    best: PlayerState | None = None
    for player in players:
        if best is None or player.score > best.score:
            best = player
    if best is None:
        raise ValueError("Cannot determine a winner without players")
    return best


def apply_move(
    state: MatchState,
    player_id: str,
    cards: Iterable[Card],
    config: EngineConfig | None = None,
    elapsed: float = 0.0,
    now: float | None = None,
) -> MatchState:
    """
    Convenience function to apply a move.

    Creates a Reducer and applies the move, returning the new state.
    Raises InvalidMoveError if the move breaks a precondition.
    """
    reducer = Reducer(config=config or DEFAULT_CONFIG)
    result = reducer.apply(state, Action.play(player_id, cards), elapsed=elapsed, now=now)
    if not result.success:
        raise InvalidMoveError(result.error, result.error_code)
    return result.new_state
