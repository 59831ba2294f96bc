"""
Animals - The eight ranks of the Kariba deck.

Rank 1 (Mouse) is the lowest, rank 8 (Elephant) the highest.
The Mouse is the only animal that scares the Elephant.
"""

from __future__ import annotations
from enum import IntEnum


class Animal(IntEnum):
    """Card ranks, lowest to highest."""
    MOUSE = 1
    MEERKAT = 2
    ZEBRA = 3
    GIRAFFE = 4
    OSTRICH = 5
    CHEETAH = 6
    RHINO = 7
    ELEPHANT = 8

    @property
    def display_name(self) -> str:
        return self.name.title()

    @property
    def emoji(self) -> str:
        return ANIMAL_EMOJI[self]


ANIMAL_EMOJI: dict[Animal, str] = {
    Animal.MOUSE: "🐭",
    Animal.MEERKAT: "🐿️",
    Animal.ZEBRA: "🦓",
    Animal.GIRAFFE: "🦒",
    Animal.OSTRICH: "🐦",
    Animal.CHEETAH: "🐆",
    Animal.RHINO: "🦏",
    Animal.ELEPHANT: "🐘",
}

PLURALS: dict[Animal, str] = {
    Animal.MOUSE: "Mice",
    Animal.OSTRICH: "Ostriches",
}

LOWEST_RANK = Animal.MOUSE
HIGHEST_RANK = Animal.ELEPHANT
NUM_RANKS = len(Animal)


def animal_name(rank: int, count: int = 1) -> str:
    """Readable animal name, pluralised for log messages."""
    animal = Animal(rank)
    if count == 1:
        return animal.display_name
    return PLURALS.get(animal, f"{animal.display_name}s")
