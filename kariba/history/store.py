"""
History Store - Accounts and match records.

The store:
- Registers and authenticates users
- Saves completed-match records per user
- Returns a user's history, newest first

Two implementations:
- InMemoryHistoryStore: for tests and single-process play
- JsonFileHistoryStore: one JSON document on local disk, no database

Passwords are kept as salted SHA-256 digests. Outages surface as
StoreUnavailableError so callers can degrade instead of crashing.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
import hashlib
import json
import logging
import os
import threading
import time

from .models import UserAccount, AuthResult, MatchRecord

logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "Username or email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
MISSING_FIELDS_MESSAGE = "Username, email and password are required"


class StoreError(Exception):
    """Base class for history store failures."""


class StoreUnavailableError(StoreError):
    """The backing storage could not be reached or written."""


def hash_password(password: str, salt: str) -> str:
    """Salted SHA-256 digest of a password."""
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


def _new_salt() -> str:
    return os.urandom(8).hex()


class HistoryStore(ABC):
    """
    Interface for account and history storage.

    Implementations keep user rows and record lists; the shared
    register/authenticate logic lives here.
    """

    def register(self, username: str, email: str, password: str) -> AuthResult:
        """Create a user. Fails on missing fields or a taken username/email."""
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            return AuthResult.failed(MISSING_FIELDS_MESSAGE)

        salt = _new_salt()
        row = {
            "email": email,
            "salt": salt,
            "password_hash": hash_password(password, salt),
            "created_at": time.time(),
        }
        if not self._insert_user_if_absent(username, row):
            return AuthResult.failed(DUPLICATE_USER_MESSAGE)
        logger.info("Registered user %s", username)
        return AuthResult(
            success=True,
            message="Registration successful",
            user=_to_account(username, row),
        )

    def authenticate(self, username: str, password: str) -> AuthResult:
        """Check credentials."""
        row = self._load_users().get(username)
        if not row or hash_password(password or "", row["salt"]) != row["password_hash"]:
            return AuthResult.failed(INVALID_CREDENTIALS_MESSAGE)
        return AuthResult(
            success=True,
            message="Login successful",
            user=_to_account(username, row),
        )

    @abstractmethod
    def save_record(self, username: str, record: MatchRecord) -> None:
        """Persist a completed match for a user."""
        pass

    @abstractmethod
    def fetch_history(self, username: str) -> list[MatchRecord]:
        """A user's records, newest first. Unknown users have no history."""
        pass

    @abstractmethod
    def _load_users(self) -> dict[str, dict[str, Any]]:
        pass

    @abstractmethod
    def _insert_user_if_absent(self, username: str, row: dict[str, Any]) -> bool:
        """Add the user unless the username or email is taken. Check and insert are atomic."""
        pass


def _is_taken(users: dict[str, dict[str, Any]], username: str, email: str) -> bool:
    return any(name == username or row["email"] == email for name, row in users.items())


def _to_account(username: str, row: dict[str, Any]) -> UserAccount:
    return UserAccount(username=username, email=row["email"], created_at=row["created_at"])


def _newest_first(records: list[MatchRecord]) -> list[MatchRecord]:
    return sorted(records, key=lambda r: r.completed_at, reverse=True)


class InMemoryHistoryStore(HistoryStore):
    """Process-local store. Everything is lost on exit."""

    def __init__(self):
        self._users: dict[str, dict[str, Any]] = {}
        self._records: dict[str, list[MatchRecord]] = {}
        self._lock = threading.Lock()

    def save_record(self, username: str, record: MatchRecord) -> None:
        if username not in self._users:
            raise StoreError(f"User {username} not found")
        self._records.setdefault(username, []).append(record)

    def fetch_history(self, username: str) -> list[MatchRecord]:
        return _newest_first(self._records.get(username, []))

    def _load_users(self) -> dict[str, dict[str, Any]]:
        return dict(self._users)

    def _insert_user_if_absent(self, username: str, row: dict[str, Any]) -> bool:
        with self._lock:
            if _is_taken(self._users, username, row["email"]):
                return False
            self._users[username] = row
            return True


class JsonFileHistoryStore(HistoryStore):
    """
    File-based store: a single JSON document.

    Usage:
        store = JsonFileHistoryStore(data_dir="~/.kariba")
        store.register("ana", "ana@example.com", "secret")
        store.save_record("ana", record)
        store.fetch_history("ana")

    Layout:
        {"users": {username: row}, "records": {username: [record, ...]}}
    """

    FILENAME = "history.json"

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir).expanduser()
        self.path = self.data_dir / self.FILENAME
        self._lock = threading.Lock()

    def save_record(self, username: str, record: MatchRecord) -> None:
        with self._lock:
            data = self._read()
            if username not in data["users"]:
                raise StoreError(f"User {username} not found")
            data["records"].setdefault(username, []).append(record.to_dict())
            self._write(data)

    def fetch_history(self, username: str) -> list[MatchRecord]:
        with self._lock:
            data = self._read()
        rows = data["records"].get(username, [])
        return _newest_first([MatchRecord.from_dict(r) for r in rows])

    def _load_users(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return self._read()["users"]

    def _insert_user_if_absent(self, username: str, row: dict[str, Any]) -> bool:
        with self._lock:
            data = self._read()
            if _is_taken(data["users"], username, row["email"]):
                return False
            data["users"][username] = row
            self._write(data)
            return True

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"users": {}, "records": {}}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot read {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt history file {self.path}: {e}") from e
        data.setdefault("users", {})
        data.setdefault("records", {})
        return data

    def _write(self, data: dict[str, Any]) -> None:
        """Write via a temp file so a failed write never truncates the store."""
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write {self.path}: {e}") from e
