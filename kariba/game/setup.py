"""
Kariba Match Setup - Creates the deck and the initial match state.

This module handles:
- Building the 64-card deck (8 copies of each animal)
- Shuffling with an injected random source for reproducibility
- Seating one human and the configured number of bots
- Dealing the opening hands

The setup follows the standard table of up to 4 players.
"""

from __future__ import annotations
import random
import time
import uuid

from ..config import (
    EngineConfig,
    DEFAULT_CONFIG,
    DEFAULT_HUMAN_NAME,
    MIN_TABLE_SIZE,
    MAX_TABLE_SIZE,
)
from ..engine_core.state import (
    MatchState,
    MatchStatus,
    PlayerState,
    Card,
    LogType,
    empty_board,
    sort_hand,
)
from .animals import Animal

HUMAN_PLAYER_ID = "human"


def build_deck(rng: random.Random, config: EngineConfig | None = None) -> list[Card]:
    """
    Build and shuffle the deck.

    Every card gets a unique id of the form "<animal>_<copy>".
    rng.shuffle is a Fisher-Yates shuffle, so every permutation is
    equally likely.
    """
    cfg = config or DEFAULT_CONFIG
    deck = [
        Card(card_id=f"{animal.name.lower()}_{copy}", rank=int(animal))
        for animal in Animal
        for copy in range(cfg.cards_per_rank)
    ]
    rng.shuffle(deck)
    return deck


def initialize_match(
    human_name: str,
    rng: random.Random | None = None,
    seed: int | None = None,
    config: EngineConfig | None = None,
    match_id: str | None = None,
    now: float | None = None,
) -> MatchState:
    """
    Set up a new match.

    Args:
        human_name: Display name for the human seat (falls back to a default)
        rng: Random source for the shuffle (takes precedence over seed)
        seed: Seed for a fresh random.Random when rng is not given
        config: Table constants (hand size, table size, ...)
        match_id: Id for the match (a uuid by default)
        now: Start timestamp (defaults to time.time())

    Returns:
        Initial MatchState ready for the first move
    """
    cfg = config or DEFAULT_CONFIG
    if cfg.table_size < MIN_TABLE_SIZE or cfg.table_size > MAX_TABLE_SIZE:
        raise ValueError(
            f"Kariba supports {MIN_TABLE_SIZE}-{MAX_TABLE_SIZE} players, got {cfg.table_size}"
        )

    rng = rng or random.Random(seed)
    started_at = time.time() if now is None else now

    deck = build_deck(rng, cfg)
    players, deck = _deal_initial_hands(_create_players(human_name, cfg), deck, cfg)

    state = MatchState(
        match_id=match_id or str(uuid.uuid4()),
        players=players,
        board=empty_board(),
        draw_pile=tuple(deck),
        turn_number=1,
        current_player_idx=0,
        status=MatchStatus.PLAYING,
        started_at=started_at,
    )
    return state.with_log(
        LogType.INFO,
        "The game begins! Scare away as many animals as you can.",
        started_at,
    )


def _create_players(human_name: str, config: EngineConfig) -> list[PlayerState]:
    """Create the human seat followed by the bots."""
    players = [
        PlayerState(
            player_id=HUMAN_PLAYER_ID,
            name=human_name.strip() or DEFAULT_HUMAN_NAME,
            is_human=True,
        )
    ]
    for i in range(config.num_bots):
        players.append(PlayerState(
            player_id=f"bot_{i + 1}",
            name=config.bot_name(i),
            is_human=False,
        ))
    return players


def _deal_initial_hands(
    players: list[PlayerState],
    deck: list[Card],
    config: EngineConfig,
) -> tuple[tuple[PlayerState, ...], list[Card]]:
    """Deal hand_size cards to each player in seat order."""
    dealt_players = []
    for player in players:
        count = min(config.hand_size, len(deck))
        hand, deck = deck[:count], deck[count:]
        dealt_players.append(player._copy_with(hand=sort_hand(hand)))
    return tuple(dealt_players), deck
