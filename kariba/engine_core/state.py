"""
Match State - Immutable snapshot of a Kariba match.

Design principles:
- Immutable: frozen dataclasses holding tuples, every change returns new state
- Serializable: plain values only, so snapshots can be rendered or replayed
- Conservative: a card is in exactly one place (hand, captured pile,
  draw pile or one board slot) at all times

Callers may keep any number of earlier states around (undo, replay, tests)
without them being affected by later moves.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable

from ..game.animals import Animal, NUM_RANKS


class MatchStatus(Enum):
    """Lifecycle of a match."""
    PLAYING = "playing"
    FINISHED = "finished"


class LogType(Enum):
    """Kinds of log entries."""
    INFO = "info"
    ACTION = "action"
    CAPTURE = "capture"


@dataclass(frozen=True)
class Card:
    """
    A single card.

    card_id is unique across the deck; rank is the animal (1-8).
    """
    card_id: str
    rank: int

    @property
    def animal(self) -> Animal:
        return Animal(self.rank)


@dataclass(frozen=True)
class LogEntry:
    """One observational log line. Never read by game logic."""
    entry_id: str
    entry_type: LogType
    message: str
    timestamp: float


# Board slots are indexed by rank - 1.
Board = tuple[tuple[Card, ...], ...]


def empty_board() -> Board:
    """Eight empty waterhole slots."""
    return tuple(() for _ in range(NUM_RANKS))


def sort_hand(cards: Iterable[Card]) -> tuple[Card, ...]:
    """Sort cards by rank (stable, cosmetic only)."""
    return tuple(sorted(cards, key=lambda c: c.rank))


@dataclass(frozen=True)
class PlayerState:
    """
    State for a single seat.

    The score is derived from the captured pile and never stored separately.
    """
    player_id: str
    name: str
    is_human: bool = True
    hand: tuple[Card, ...] = ()
    captured: tuple[Card, ...] = ()
    time_used: float = 0.0

    @property
    def score(self) -> int:
        return len(self.captured)

    @property
    def has_cards(self) -> bool:
        return len(self.hand) > 0

    def cards_of_rank(self, rank: int) -> tuple[Card, ...]:
        """All cards of one rank in hand, in hand order."""
        return tuple(c for c in self.hand if c.rank == rank)

    def find_cards(self, card_ids: Iterable[str]) -> tuple[Card, ...] | None:
        """
        Resolve card ids against the hand.

        Returns None if any id is missing or repeated.
        """
        ids = list(card_ids)
        if len(set(ids)) != len(ids):
            return None
        by_id = {c.card_id: c for c in self.hand}
        if any(card_id not in by_id for card_id in ids):
            return None
        return tuple(by_id[card_id] for card_id in ids)

    def holds(self, cards: Iterable[Card]) -> bool:
        """True if every card is in hand exactly as given (and none is listed twice)."""
        cards = tuple(cards)
        return self.find_cards(c.card_id for c in cards) == cards

    def _copy_with(self, **kwargs: Any) -> PlayerState:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class MatchState:
    """
    Complete match state at a point in time.

    This is the canonical state the engine operates on.
    All state changes go through the reducer.
    """
    match_id: str

    players: tuple[PlayerState, ...] = ()
    board: Board = field(default_factory=empty_board)
    draw_pile: tuple[Card, ...] = ()
    log: tuple[LogEntry, ...] = ()

    turn_number: int = 1
    current_player_idx: int = 0
    status: MatchStatus = MatchStatus.PLAYING
    winner_id: str | None = None

    started_at: float = 0.0

    # Accepted moves in order, for replay
    move_history: tuple[Any, ...] = ()

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_idx]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_finished(self) -> bool:
        return self.status == MatchStatus.FINISHED

    @property
    def winner(self) -> PlayerState | None:
        if self.winner_id is None:
            return None
        return self.get_player(self.winner_id)

    def get_player(self, player_id: str) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def slot(self, rank: int) -> tuple[Card, ...]:
        """Cards at the waterhole for one rank."""
        return self.board[rank - 1]

    def total_cards(self) -> int:
        """Cards across hands, captured piles, board and draw pile."""
        in_players = sum(len(p.hand) + len(p.captured) for p in self.players)
        on_board = sum(len(s) for s in self.board)
        return in_players + on_board + len(self.draw_pile)

    def with_player(self, player: PlayerState) -> MatchState:
        """Return new state with updated player."""
        new_players = tuple(
            player if p.player_id == player.player_id else p
            for p in self.players
        )
        return self._copy_with(players=new_players)

    def with_slot(self, rank: int, cards: tuple[Card, ...]) -> MatchState:
        """Return new state with one board slot replaced."""
        new_board = tuple(
            cards if idx == rank - 1 else s
            for idx, s in enumerate(self.board)
        )
        return self._copy_with(board=new_board)

    def with_log(self, entry_type: LogType, message: str, timestamp: float) -> MatchState:
        """Return new state with a log entry appended."""
        entry = LogEntry(
            entry_id=f"log_{len(self.log)}",
            entry_type=entry_type,
            message=message,
            timestamp=timestamp,
        )
        return self._copy_with(log=self.log + (entry,))

    def _copy_with(self, **kwargs: Any) -> MatchState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
