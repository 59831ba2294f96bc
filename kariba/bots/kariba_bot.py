"""
Kariba Bot - The standard computer opponent.

Strategy, in order:
1. Capture: play a whole rank group that would bring its waterhole slot to
   three or more cards while there is something to scare away. Ranks are
   tried lowest first.
2. Pressure: otherwise play the largest rank group. Equal groups go to the
   lower rank.

The bot never looks ahead beyond its own move and never considers
what opponents hold.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .policy import BotPolicy, BotDecision
from ..engine_core.action import Action
from ..engine_core.capture import would_capture, find_capture_target
from ..game.animals import animal_name

if TYPE_CHECKING:
    from ..engine_core.state import MatchState, Card


def group_by_rank(hand: tuple[Card, ...]) -> dict[int, tuple[Card, ...]]:
    """Partition a hand into rank groups, keyed in ascending rank order."""
    groups: dict[int, list[Card]] = {}
    for card in sorted(hand, key=lambda c: c.rank):
        groups.setdefault(card.rank, []).append(card)
    return {rank: tuple(cards) for rank, cards in groups.items()}


def choose_move(state: MatchState) -> tuple[Card, ...] | None:
    """
    Pick the cards the active player should play.

    Returns None only when the active player's hand is empty.
    """
    groups = group_by_rank(state.current_player.hand)
    if not groups:
        return None

    for rank, cards in groups.items():
        if would_capture(rank, state.board, len(cards)):
            return cards

    largest = max(len(cards) for cards in groups.values())
    for rank, cards in groups.items():
        if len(cards) == largest:
            return cards
    return None


@dataclass
class KaribaBot(BotPolicy):
    """
    Capture-seeking bot.

    Usage:
        bot = KaribaBot(player_id="bot_1")
        decision = bot.select_action(state, legal_actions(state))
        print(decision.explanation)
    """
    player_id: str

    def select_action(
        self,
        state: MatchState,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select the move given by choose_move().

        legal_actions is only used for the evaluation count; the strategy
        derives its move straight from the hand and the board.
        """
        cards = choose_move(state)
        if cards is None:
            raise ValueError(f"{self.player_id} has no cards to play")

        rank = cards[0].rank
        target = None
        if would_capture(rank, state.board, len(cards)):
            target = find_capture_target(rank, state.board)

        if target is not None:
            explanation = (
                f"Play {len(cards)} {animal_name(rank, len(cards))} "
                f"to scare away the {animal_name(target, 2)}"
            )
        else:
            explanation = f"Play largest group: {len(cards)} {animal_name(rank, len(cards))}"

        return BotDecision(
            action=Action.play(self.player_id, cards),
            explanation=explanation,
            evaluated_actions=len(legal_actions),
            evaluation_details={"rank": rank, "capture_target": target},
        )
