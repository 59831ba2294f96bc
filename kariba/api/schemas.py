"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client (web or terminal UI)
and the engine. The client only ever sees snapshots: bot hands are shown
as counts, the human hand in full.

Error Codes:
- INVALID_MOVE: Selection is empty, mixed, not in hand or out of turn
- MATCH_NOT_FOUND: Match does not exist or has been ended
- MATCH_FINISHED: Match is over, no more moves
- INVALID_CREDENTIALS: Wrong username or password
- DUPLICATE_USER: Username or email already registered
- STORE_UNAVAILABLE: Account/history storage could not be reached
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Where the match is from the client's point of view."""
    YOUR_TURN = "your_turn"
    BOTS_THINKING = "bots_thinking"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_MOVE = "INVALID_MOVE"
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    MATCH_FINISHED = "MATCH_FINISHED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    DUPLICATE_USER = "DUPLICATE_USER"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


ERROR_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.INVALID_MOVE: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_CREDENTIALS: 401,
    ErrorCode.MATCH_NOT_FOUND: 404,
    ErrorCode.MATCH_FINISHED: 409,
    ErrorCode.DUPLICATE_USER: 409,
    ErrorCode.STORE_UNAVAILABLE: 503,
}


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    card_id: str
    rank: int = Field(ge=1, le=8)
    animal: str
    emoji: str

    model_config = {"from_attributes": True}


class BoardSlotInfo(BaseModel):
    """One waterhole slot."""
    rank: int = Field(ge=1, le=8)
    animal: str
    card_count: int = 0
    cards: list[CardInfo] = Field(default_factory=list)


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    name: str
    is_human: bool
    is_current_turn: bool = False
    score: int = 0
    hand_count: int = 0
    time_used: float = 0.0

    model_config = {"from_attributes": True}


class LogEntryInfo(BaseModel):
    """A log line."""
    entry_id: str
    entry_type: str = Field(description="info, action or capture")
    message: str
    timestamp: float


class UserInfo(BaseModel):
    username: str
    email: str
    created_at: float


class PlayerRecordInfo(BaseModel):
    name: str
    score: int
    rank: int
    time_used: float
    is_human: bool


class MatchRecordInfo(BaseModel):
    """A finished match in a user's history."""
    match_id: str
    completed_at: float
    duration: float
    winner_name: str
    players: list[PlayerRecordInfo] = Field(default_factory=list)


# =============================================================================
# Request Models
# =============================================================================

class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1)


class LoginRequest(BaseModel):
    username: str
    password: str


class CreateMatchRequest(BaseModel):
    """Start a match against the bots."""
    human_name: str = Field("", description="Display name; a default is used when empty")
    seed: Optional[int] = Field(None, description="Shuffle seed for a reproducible deal")
    username: Optional[str] = Field(None, description="Logged-in user who gets the history record")


class PlayCardsRequest(BaseModel):
    """Human intent: the ids of the cards to play (all of one animal)."""
    card_ids: list[str] = Field(min_length=1)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Error response, returned for any 4xx or 5xx status."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class AuthResponse(BaseModel):
    success: bool
    message: str
    user: Optional[UserInfo] = None


class MatchStateResponse(BaseModel):
    """Complete match snapshot for display."""
    match_id: str
    status: str = Field(description="playing or finished")
    session_status: SessionStatus
    turn_number: int
    current_player_id: Optional[str] = None

    players: list[PlayerInfo] = Field(default_factory=list)
    board: list[BoardSlotInfo] = Field(default_factory=list)
    draw_pile_count: int = 0
    hand: list[CardInfo] = Field(default_factory=list, description="The human player's hand")
    log: list[LogEntryInfo] = Field(default_factory=list)

    winner: Optional[PlayerInfo] = None

    # What happened in the request that produced this snapshot
    bot_actions: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class HistoryResponse(BaseModel):
    """A user's finished matches; empty with retry=True if storage is down."""
    username: str
    records: list[MatchRecordInfo] = Field(default_factory=list)
    available: bool = True
    retry: bool = False
    message: Optional[str] = None


class EndMatchResponse(BaseModel):
    success: bool
    match_id: str


class MatchListResponse(BaseModel):
    matches: list[str] = Field(default_factory=list)
    count: int = 0


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
