"""
Configuration - Table constants and environment settings.

Two layers:
- EngineConfig: rule constants for one match (hand size, table size, ...)
- Environment: deployment settings read from os.environ at call time

Environment variables:
    KARIBA_ENV          "development" or "production" (production hides the API docs)
    KARIBA_DATA_DIR     Directory for the JSON history store (default ~/.kariba)
    KARIBA_BOT_DELAY    Seconds a bot waits before playing (presentation pacing)
    ALLOWED_ORIGINS     Comma separated CORS origins for the HTTP API
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import os


HAND_SIZE = 5
TABLE_SIZE = 4
CARDS_PER_RANK = 8
BOT_DELAY_SECONDS = 1.5

MIN_TABLE_SIZE = 2
MAX_TABLE_SIZE = 4

DEFAULT_HUMAN_NAME = "Player 1"
DEFAULT_BOT_NAMES = ("Bot 1", "Bot 2", "Bot 3")


@dataclass(frozen=True)
class EngineConfig:
    """
    Rule constants for a match.

    The defaults are the standard 4-seat table: one human, three bots,
    five cards in hand, eight copies of each animal.
    """
    hand_size: int = HAND_SIZE
    table_size: int = TABLE_SIZE
    cards_per_rank: int = CARDS_PER_RANK
    bot_delay_seconds: float = BOT_DELAY_SECONDS
    bot_names: tuple[str, ...] = field(default=DEFAULT_BOT_NAMES)

    @property
    def num_bots(self) -> int:
        return self.table_size - 1

    def bot_name(self, index: int) -> str:
        """Display name for the bot in the given bot slot (0-based)."""
        if index < len(self.bot_names):
            return self.bot_names[index]
        return f"Bot {index + 1}"


DEFAULT_CONFIG = EngineConfig()


def get_env() -> str:
    return os.getenv("KARIBA_ENV", "development")


def get_data_dir() -> Path:
    """Directory holding the JSON history store."""
    data_dir = os.getenv("KARIBA_DATA_DIR")
    if data_dir:
        return Path(data_dir)
    return Path.home() / ".kariba"


def get_allowed_origins() -> list[str]:
    return os.getenv("ALLOWED_ORIGINS", "*").split(",")


def load_config() -> EngineConfig:
    """
    Build an EngineConfig, honouring KARIBA_BOT_DELAY when set.

    Raises ValueError if KARIBA_BOT_DELAY is not a number.
    """
    delay = os.getenv("KARIBA_BOT_DELAY")
    if delay is None:
        return DEFAULT_CONFIG
    try:
        bot_delay = float(delay)
    except ValueError:
        raise ValueError(f"KARIBA_BOT_DELAY must be a number, got {delay!r}")
    return EngineConfig(bot_delay_seconds=bot_delay)
