"""
Kariba game content - animals and match setup.

Setup lives in kariba.game.setup and is imported from there; this package
only re-exports the animal catalogue so the engine core can depend on it.
"""

from .animals import Animal, animal_name, LOWEST_RANK, HIGHEST_RANK, NUM_RANKS

__all__ = [
    "Animal",
    "animal_name",
    "LOWEST_RANK",
    "HIGHEST_RANK",
    "NUM_RANKS",
]
