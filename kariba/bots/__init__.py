"""
Bots module - Computer opponents.

Provides:
- BotPolicy: Interface for bot decision-making
- KaribaBot: Capture-seeking bot (the standard opponent)
- RandomPolicy: Uniform random legal moves, for tests and simulations
- choose_move: The standard bot strategy as a plain function
"""

from .policy import BotPolicy, BotDecision, RandomPolicy
from .kariba_bot import KaribaBot, choose_move, group_by_rank

__all__ = [
    "BotPolicy",
    "BotDecision",
    "RandomPolicy",
    "KaribaBot",
    "choose_move",
    "group_by_rank",
]
