"""
History module - Accounts and completed-match records.

This is the only persistence in the system; match play itself is in-memory.
"""

from .models import UserAccount, AuthResult, MatchRecord, PlayerRecord, build_match_record
from .store import (
    HistoryStore,
    InMemoryHistoryStore,
    JsonFileHistoryStore,
    StoreError,
    StoreUnavailableError,
    DUPLICATE_USER_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
)
from .service import HistoryService, HistoryView

__all__ = [
    "UserAccount",
    "AuthResult",
    "MatchRecord",
    "PlayerRecord",
    "build_match_record",
    "HistoryStore",
    "InMemoryHistoryStore",
    "JsonFileHistoryStore",
    "StoreError",
    "StoreUnavailableError",
    "DUPLICATE_USER_MESSAGE",
    "INVALID_CREDENTIALS_MESSAGE",
    "HistoryService",
    "HistoryView",
]
