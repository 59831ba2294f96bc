"""
Tests for accounts and match history.

Tests:
- Registration and login
- Record ordering and match summaries
- JSON file persistence
- Degraded behaviour when storage fails
"""

import threading

import pytest

from ..engine_core.reducer import apply_move
from ..history import (
    HistoryService,
    InMemoryHistoryStore,
    JsonFileHistoryStore,
    MatchRecord,
    PlayerRecord,
    StoreError,
    StoreUnavailableError,
    build_match_record,
    DUPLICATE_USER_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
)
from .conftest import make_cards, make_state


def make_record(match_id, completed_at):
    return MatchRecord(
        match_id=match_id,
        completed_at=completed_at,
        duration=60.0,
        winner_name="Ana",
        players=[PlayerRecord(name="Ana", score=4, rank=1, time_used=12.5, is_human=True)],
    )


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryHistoryStore()
    return JsonFileHistoryStore(tmp_path / "data")


class TestAccounts:
    """Registration and authentication, for both stores."""

    def test_register_and_login(self, store):
        registered = store.register("ana", "ana@example.com", "secret")
        assert registered.success
        assert registered.user.username == "ana"

        result = store.authenticate("ana", "secret")
        assert result.success
        assert result.user.email == "ana@example.com"

    def test_duplicate_username(self, store):
        store.register("ana", "ana@example.com", "secret")
        result = store.register("ana", "other@example.com", "secret")
        assert not result.success
        assert result.message == DUPLICATE_USER_MESSAGE

    def test_duplicate_email(self, store):
        store.register("ana", "ana@example.com", "secret")
        result = store.register("bea", "ana@example.com", "secret")
        assert not result.success
        assert result.message == DUPLICATE_USER_MESSAGE

    def test_missing_fields(self, store):
        result = store.register("  ", "ana@example.com", "secret")
        assert not result.success
        assert result.message != DUPLICATE_USER_MESSAGE

    def test_wrong_password(self, store):
        store.register("ana", "ana@example.com", "secret")
        result = store.authenticate("ana", "guess")
        assert not result.success
        assert result.message == INVALID_CREDENTIALS_MESSAGE

    def test_unknown_user(self, store):
        result = store.authenticate("nobody", "secret")
        assert not result.success
        assert result.message == INVALID_CREDENTIALS_MESSAGE

    def test_concurrent_registration_of_one_name(self, store):
        """Only one of several simultaneous registrations of a name wins."""
        barrier = threading.Barrier(8)
        results = []

        def register(i):
            barrier.wait()
            results.append(store.register("ana", f"ana{i}@example.com", "secret"))

        threads = [threading.Thread(target=register, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        winners = [r for r in results if r.success]
        assert len(winners) == 1
        assert all(r.message == DUPLICATE_USER_MESSAGE for r in results if not r.success)
        assert store.authenticate("ana", "secret").user.email == winners[0].user.email


class TestRecords:
    """Saving and fetching finished matches."""

    def test_newest_first(self, store):
        store.register("ana", "ana@example.com", "secret")
        store.save_record("ana", make_record("first", 100.0))
        store.save_record("ana", make_record("third", 300.0))
        store.save_record("ana", make_record("second", 200.0))

        history = store.fetch_history("ana")

        assert [r.match_id for r in history] == ["third", "second", "first"]

    def test_unknown_user_has_no_history(self, store):
        assert store.fetch_history("nobody") == []

    def test_save_for_unknown_user_fails(self, store):
        with pytest.raises(StoreError):
            store.save_record("nobody", make_record("m", 1.0))

    def test_records_kept_per_user(self, store):
        store.register("ana", "ana@example.com", "secret")
        store.register("bea", "bea@example.com", "secret")
        store.save_record("ana", make_record("m1", 1.0))
        assert store.fetch_history("bea") == []


class TestBuildMatchRecord:
    def test_players_ranked_by_score(self):
        state = make_state(
            [make_cards(3, 1), (), ()],
            captured={1: make_cards(7, 1), 2: make_cards(6, 3)},
        )
        finished = apply_move(state, "human", make_cards(3, 1), now=1090.0)

        record = build_match_record(finished, completed_at=1100.0)

        assert record.match_id == "test_match"
        assert record.winner_name == "Bot 2"
        assert record.duration == 100.0
        assert [(p.name, p.score, p.rank) for p in record.players] == [
            ("Bot 2", 3, 1),
            ("Bot 1", 1, 2),
            ("Ana", 0, 3),
        ]

    def test_unfinished_match_rejected(self):
        state = make_state([make_cards(3, 1), ()])
        with pytest.raises(ValueError):
            build_match_record(state)


class TestJsonFileStore:
    """On-disk persistence."""

    def test_survives_reopen(self, tmp_path):
        JsonFileHistoryStore(tmp_path).register("ana", "ana@example.com", "secret")
        JsonFileHistoryStore(tmp_path).save_record("ana", make_record("m1", 5.0))

        reopened = JsonFileHistoryStore(tmp_path)

        assert reopened.authenticate("ana", "secret").success
        assert reopened.fetch_history("ana") == [make_record("m1", 5.0)]

    def test_password_not_stored_in_plain_text(self, tmp_path):
        store = JsonFileHistoryStore(tmp_path)
        store.register("ana", "ana@example.com", "hunter2")
        assert "hunter2" not in store.path.read_text(encoding="utf-8")

    def test_corrupt_file(self, tmp_path):
        store = JsonFileHistoryStore(tmp_path)
        store.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            store.fetch_history("ana")

    def test_unwritable_location(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileHistoryStore(blocker / "data")
        with pytest.raises(StoreUnavailableError):
            store.register("ana", "ana@example.com", "secret")


class FailingStore(InMemoryHistoryStore):
    """Store whose backing storage is down."""

    def save_record(self, username, record):
        raise StoreUnavailableError("disk on fire")

    def fetch_history(self, username):
        raise StoreUnavailableError("disk on fire")


class TestHistoryService:
    """Failures degrade instead of propagating."""

    def test_fetch_available(self, history_service):
        history_service.store.register("ana", "ana@example.com", "secret")
        history_service.store.save_record("ana", make_record("m1", 1.0))

        view = history_service.fetch("ana")

        assert view.available
        assert not view.retry
        assert [r.match_id for r in view.records] == ["m1"]

    def test_fetch_degrades(self):
        view = HistoryService(store=FailingStore()).fetch("ana")
        assert view.records == []
        assert not view.available
        assert view.retry
        assert view.message

    def test_save_failure_returns_false(self):
        assert not HistoryService(store=FailingStore()).save("ana", make_record("m1", 1.0))

    def test_save_success(self, history_service):
        history_service.store.register("ana", "ana@example.com", "secret")
        assert history_service.save("ana", make_record("m1", 1.0))
