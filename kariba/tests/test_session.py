"""
Tests for sessions and the game loop.

Tests:
- Session lifecycle
- Human moves followed by bot replies
- Paced bot turns, cancellation and abandonment
- Saving the finished match to history
"""

import asyncio

from ..bots import choose_move
from ..config import EngineConfig
from ..history import HistoryService, InMemoryHistoryStore
from ..engine_core.action import MoveErrorCode
from ..session import GameLoop, LoopState, SessionManager, SessionState


def play_to_end(loop):
    """Drive the human seat with the standard bot strategy until the match ends."""
    result = None
    while not loop.session.match_state.is_finished:
        cards = choose_move(loop.session.match_state)
        result = loop.submit_human_move([c.card_id for c in cards])
        assert result.success, result.errors
    return result


class TestSessionManager:
    """Session lifecycle."""

    def test_create_session(self, session_manager):
        session = session_manager.create_session(human_name="Ana", seed=1)

        assert session.is_active()
        assert session.is_human_turn()
        assert session.match_state.match_id == session.session_id
        assert session.states == [session.match_state]
        assert set(session.bots) == {"bot_1", "bot_2", "bot_3"}

    def test_same_seed_same_deal(self, session_manager):
        first = session_manager.create_session(seed=9)
        second = session_manager.create_session(seed=9)
        assert first.match_state.players == second.match_state.players
        assert first.match_state.draw_pile == second.match_state.draw_pile

    def test_end_unfinished_session_abandons(self, session_manager):
        session = session_manager.create_session(seed=1)

        assert session_manager.end_session(session.session_id, reason="user_ended")

        assert session.state == SessionState.ABANDONED
        assert session_manager.get_session(session.session_id) is None
        assert not session_manager.end_session(session.session_id)

    def test_list_active_sessions(self, session_manager):
        ids = {session_manager.create_session(seed=i).session_id for i in range(3)}
        assert set(session_manager.list_active_sessions()) == ids

    def test_cleanup_keeps_active_sessions(self, session_manager):
        session_manager.create_session(seed=1)
        assert session_manager.cleanup_stale_sessions(max_age_seconds=0) == 0


class TestGameLoop:
    """Human moves and bot replies."""

    def test_bots_reply_after_human_move(self, session_manager):
        session = session_manager.create_session(seed=3)
        loop = GameLoop(session)
        card = session.match_state.get_player("human").hand[0]

        result = loop.submit_human_move([card.card_id])

        assert result.success
        assert len(result.bot_actions) == 3
        assert result.loop_state == LoopState.WAITING_HUMAN_ACTION
        assert session.is_human_turn()
        assert len(session.states) == 5

    def test_unknown_card_rejected(self, session_manager):
        session = session_manager.create_session(seed=3)
        before = session.match_state
        loop = GameLoop(session)

        result = loop.submit_human_move(["unicorn_0"])

        assert not result.success
        assert result.error_code == MoveErrorCode.CARDS_NOT_IN_HAND
        assert session.match_state is before

    def test_mixed_ranks_rejected(self, session_manager):
        session = session_manager.create_session(seed=3)
        hand = session.match_state.get_player("human").hand
        mixed = [hand[0].card_id, next(c for c in hand if c.rank != hand[0].rank).card_id]

        result = GameLoop(session).submit_human_move(mixed)

        assert not result.success
        assert result.error_code == MoveErrorCode.MIXED_RANKS

    def test_time_used_accumulates(self, session_manager):
        session = session_manager.create_session(seed=3)
        ticks = iter(range(1, 100))
        session.turn_started_at = 0.0
        loop = GameLoop(session, clock=lambda: float(next(ticks)))
        card = session.match_state.get_player("human").hand[0]

        loop.submit_human_move([card.card_id], run_bots=False)

        assert session.match_state.get_player("human").time_used == 1.0

    def test_play_full_match(self, session_manager):
        session = session_manager.create_session(seed=5)
        loop = GameLoop(session)

        result = play_to_end(loop)

        assert result.loop_state == LoopState.GAME_OVER
        assert result.winner == session.match_state.winner_id
        assert session.state == SessionState.GAME_OVER
        assert session.match_state.total_cards() == 64

    def test_moves_after_finish_rejected(self, session_manager):
        session = session_manager.create_session(seed=5)
        loop = GameLoop(session)
        play_to_end(loop)

        result = loop.submit_human_move(["mouse_0"])

        assert not result.success
        assert result.error_code == MoveErrorCode.MATCH_FINISHED


class TestPacedBots:
    """Presentation pacing never corrupts the match."""

    def test_paced_bots_play(self, session_manager):
        session = session_manager.create_session(seed=3)
        loop = GameLoop(session)
        card = session.match_state.get_player("human").hand[0]
        loop.submit_human_move([card.card_id], run_bots=False)

        result = asyncio.run(loop.run_bot_turns_paced(delay=0))

        assert len(result.bot_actions) == 3
        assert session.is_human_turn()

    def test_cancel_drops_pending_move(self, session_manager):
        session = session_manager.create_session(seed=3)
        loop = GameLoop(session)
        card = session.match_state.get_player("human").hand[0]
        loop.submit_human_move([card.card_id], run_bots=False)
        waiting = session.match_state

        async def start_then_cancel():
            task = asyncio.create_task(loop.run_bot_turns_paced(delay=60))
            await asyncio.sleep(0)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                return True
            return False

        assert asyncio.run(start_then_cancel())
        assert session.match_state is waiting
        assert session.states[-1] is waiting

    def test_abandon_during_delay(self, session_manager):
        session = session_manager.create_session(seed=3)
        loop = GameLoop(session)
        card = session.match_state.get_player("human").hand[0]
        loop.submit_human_move([card.card_id], run_bots=False)
        waiting = session.match_state

        async def start_then_abandon():
            task = asyncio.create_task(loop.run_bot_turns_paced(delay=0.01))
            await asyncio.sleep(0)
            session_manager.end_session(session.session_id, reason="user_ended")
            return await task

        result = asyncio.run(start_then_abandon())

        assert result.bot_actions == []
        assert result.loop_state == LoopState.ABANDONED
        assert session.match_state is waiting

    def test_default_delay_from_config(self):
        manager = SessionManager(config=EngineConfig(bot_delay_seconds=0))
        session = manager.create_session(seed=3)
        loop = GameLoop(session)
        card = session.match_state.get_player("human").hand[0]
        loop.submit_human_move([card.card_id], run_bots=False)

        result = asyncio.run(loop.run_bot_turns_paced())

        assert len(result.bot_actions) == 3


class TestHistoryOnFinish:
    """Finished matches go to the logged-in user's history."""

    def test_record_saved(self, session_manager):
        history = HistoryService(store=InMemoryHistoryStore())
        history.store.register("ana", "ana@example.com", "secret")
        session = session_manager.create_session(human_name="Ana", seed=5, username="ana")

        result = play_to_end(GameLoop(session, history=history))

        assert result.warnings == []
        assert session.record_saved
        records = history.fetch("ana").records
        assert len(records) == 1
        assert records[0].match_id == session.session_id
        assert [p.rank for p in records[0].players] == [1, 2, 3, 4]

    def test_store_failure_is_reported_not_raised(self, session_manager):
        """Unknown user: the save fails, the match still ends normally."""
        history = HistoryService(store=InMemoryHistoryStore())
        session = session_manager.create_session(seed=5, username="ghost")

        result = play_to_end(GameLoop(session, history=history))

        assert result.success
        assert result.loop_state == LoopState.GAME_OVER
        assert result.warnings == ["Match history could not be saved"]
        assert not session.record_saved
        assert session.match_state.is_finished

    def test_guest_match_not_saved(self, session_manager, history_service):
        session = session_manager.create_session(seed=5)
        result = play_to_end(GameLoop(session, history=history_service))
        assert result.warnings == []
        assert not session.record_saved
