"""
Kariba - Waterhole Card Game Engine

A deterministic, rules-driven engine for playing Kariba against bot opponents.
The engine provides:
- Deck building and match setup
- Immutable match state
- Turn resolution with the waterhole capture rule
- Bot policies for computer seats
- Account and match history storage
"""

__version__ = "0.1.0"
