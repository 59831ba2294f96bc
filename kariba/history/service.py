"""
History Service - Failure-tolerant access to a HistoryStore.

Match play must never depend on the store being up:
- a failed save is logged and reported, never raised
- a failed fetch degrades to an empty view the caller can retry
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .models import MatchRecord
from .store import HistoryStore, StoreError

logger = logging.getLogger(__name__)


@dataclass
class HistoryView:
    """What a caller shows for a user's history."""
    records: list[MatchRecord] = field(default_factory=list)
    available: bool = True
    retry: bool = False
    message: str | None = None


@dataclass
class HistoryService:
    store: HistoryStore

    def fetch(self, username: str) -> HistoryView:
        try:
            records = self.store.fetch_history(username)
        except StoreError as e:
            logger.warning("Failed to fetch history for %s: %s", username, e)
            return HistoryView(
                records=[],
                available=False,
                retry=True,
                message="History is temporarily unavailable",
            )
        return HistoryView(records=records)

    def save(self, username: str, record: MatchRecord) -> bool:
        """Save a record. Returns False (after logging) if the store failed."""
        try:
            self.store.save_record(username, record)
        except StoreError as e:
            logger.error("Failed to save match %s for %s: %s", record.match_id, username, e)
            return False
        logger.info("Saved match %s for %s", record.match_id, username)
        return True
