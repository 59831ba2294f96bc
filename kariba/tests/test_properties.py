"""
Whole-match properties over many seeded matches.

Every seat is bot-driven; each transition is checked for card
conservation, the hand-size rule, bot legality and termination.
"""

import random

import pytest

from ..bots import KaribaBot, RandomPolicy, choose_move
from ..config import DEFAULT_CONFIG
from ..engine_core.action_generator import legal_actions
from ..engine_core.reducer import Reducer
from ..game.setup import initialize_match

TOTAL_CARDS = 64


def play_out(seed, policy_factory):
    """Play a full match, yielding (before, action, after) for every move."""
    state = initialize_match("Ana", rng=random.Random(seed), now=0.0)
    bots = {p.player_id: policy_factory(p.player_id, seed) for p in state.players}
    reducer = Reducer()
    # Every move puts at least one card on the board
    for _ in range(TOTAL_CARDS):
        if state.is_finished:
            return
        decision = bots[state.current_player.player_id].select_action(state, legal_actions(state))
        result = reducer.apply(state, decision.action, now=0.0)
        assert result.success, result.error
        yield state, decision.action, result.new_state
        state = result.new_state
    assert state.is_finished, "match did not finish within 64 moves"


POLICIES = {
    "kariba": lambda player_id, seed: KaribaBot(player_id=player_id),
    "random": lambda player_id, seed: RandomPolicy(seed=seed),
}


@pytest.mark.parametrize("policy", sorted(POLICIES))
@pytest.mark.parametrize("seed", range(12))
class TestMatchProperties:
    """Invariants that hold for every reachable state."""

    def test_conservation(self, seed, policy):
        for _, _, after in play_out(seed, POLICIES[policy]):
            assert after.total_cards() == TOTAL_CARDS

    def test_hand_size(self, seed, policy):
        """The mover refills to min(hand size, obtainable); nobody exceeds it."""
        for before, action, after in play_out(seed, POLICIES[policy]):
            mover_before = before.get_player(action.player_id)
            mover_after = after.get_player(action.player_id)
            left = len(mover_before.hand) - len(action.cards)
            expected = min(DEFAULT_CONFIG.hand_size, left + len(before.draw_pile))
            assert len(mover_after.hand) == expected
            assert all(len(p.hand) <= DEFAULT_CONFIG.hand_size for p in after.players)

    def test_termination(self, seed, policy):
        """Finished exactly when the draw pile and every hand are empty."""
        last = None
        for _, _, after in play_out(seed, POLICIES[policy]):
            all_empty = not after.draw_pile and all(not p.hand for p in after.players)
            assert after.is_finished == all_empty
            last = after
        assert last is not None and last.is_finished
        assert last.winner is not None
        assert last.winner.score == max(p.score for p in last.players)

    def test_turn_always_on_a_seat_with_cards(self, seed, policy):
        for _, _, after in play_out(seed, POLICIES[policy]):
            if not after.is_finished:
                assert after.current_player.has_cards


@pytest.mark.parametrize("seed", range(12))
def test_bot_choice_is_legal(seed):
    """choose_move returns a non-empty same-rank subset of the hand."""
    for before, _, _ in play_out(seed, POLICIES["kariba"]):
        cards = choose_move(before)
        assert cards
        assert len({c.rank for c in cards}) == 1
        assert before.current_player.holds(cards)
