"""
Pytest fixtures for Kariba tests.
"""

import random

import pytest

from ..engine_core.state import MatchState, MatchStatus, PlayerState, Card, empty_board, sort_hand
from ..game.animals import Animal
from ..game.setup import initialize_match
from ..history import HistoryService, InMemoryHistoryStore
from ..session import SessionManager


def make_card(rank: int, copy: int = 0) -> Card:
    """Card with the same id scheme as the real deck."""
    return Card(card_id=f"{Animal(rank).name.lower()}_{copy}", rank=rank)


def make_cards(rank: int, count: int, start: int = 0) -> tuple[Card, ...]:
    return tuple(make_card(rank, copy) for copy in range(start, start + count))


def make_board(piles: dict[int, int] | None = None):
    """Board with `count` cards on each given rank (copies 5 and up)."""
    board = list(empty_board())
    for rank, count in (piles or {}).items():
        board[rank - 1] = make_cards(rank, count, start=5)
    return tuple(board)


def make_state(
    hands: list[tuple[Card, ...]],
    piles: dict[int, int] | None = None,
    draw_pile: tuple[Card, ...] = (),
    current: int = 0,
    captured: dict[int, tuple[Card, ...]] | None = None,
) -> MatchState:
    """
    Hand-built match state.

    Seat 0 is the human, the others are bots named "Bot 1", "Bot 2", ...
    """
    players = []
    for seat, hand in enumerate(hands):
        players.append(PlayerState(
            player_id="human" if seat == 0 else f"bot_{seat}",
            name="Ana" if seat == 0 else f"Bot {seat}",
            is_human=seat == 0,
            hand=sort_hand(hand),
            captured=(captured or {}).get(seat, ()),
        ))
    return MatchState(
        match_id="test_match",
        players=tuple(players),
        board=make_board(piles),
        draw_pile=tuple(draw_pile),
        current_player_idx=current,
        status=MatchStatus.PLAYING,
        started_at=1000.0,
    )


@pytest.fixture
def seeded_match() -> MatchState:
    """A freshly dealt 4-seat match with a fixed shuffle."""
    return initialize_match("Ana", rng=random.Random(42), now=1000.0)


@pytest.fixture
def history_service() -> HistoryService:
    return HistoryService(store=InMemoryHistoryStore())


@pytest.fixture
def session_manager() -> SessionManager:
    return SessionManager()
