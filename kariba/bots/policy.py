"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a match state and the legal moves and returns a decision.
Decisions carry the move plus an explanation for logs and debugging.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
import random

if TYPE_CHECKING:
    from ..engine_core.state import MatchState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The move to make
    - Explanation (for logs/debugging)
    - Evaluation details
    """
    action: Action
    explanation: str = ""
    evaluated_actions: int = 0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects moves.
    """

    @abstractmethod
    def select_action(
        self,
        state: MatchState,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select a move from the legal moves.

        Args:
            state: Current match state
            legal_actions: List of legal moves to choose from

        Returns:
            BotDecision with the selected move
        """
        pass


class RandomPolicy(BotPolicy):
    """
    Random policy - selects moves uniformly at random.

    Used for:
    - Testing
    - Baseline comparison in simulations
    """

    def __init__(self, seed: int | None = None, rng: random.Random | None = None):
        self.rng = rng or random.Random(seed)

    def select_action(
        self,
        state: MatchState,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        action = self.rng.choice(legal_actions)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            evaluated_actions=len(legal_actions),
        )
