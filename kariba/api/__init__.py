"""
API Module - HTTP interface for Kariba clients.

Exposes the engine via REST:
1. Register / log in
2. Start a match against the bots
3. Play cards and receive the bots' replies
4. Read finished-match history

Match state is session-scoped; only finished-match records are stored.
"""

from .schemas import (
    # Requests
    RegisterRequest,
    LoginRequest,
    CreateMatchRequest,
    PlayCardsRequest,
    # Responses
    AuthResponse,
    MatchStateResponse,
    HistoryResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    PlayerInfo,
    BoardSlotInfo,
    ErrorCode,
    SessionStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "RegisterRequest",
    "LoginRequest",
    "CreateMatchRequest",
    "PlayCardsRequest",
    # Responses
    "AuthResponse",
    "MatchStateResponse",
    "HistoryResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "PlayerInfo",
    "BoardSlotInfo",
    "ErrorCode",
    "SessionStatus",
    # Service
    "APIService",
    "create_app",
]
