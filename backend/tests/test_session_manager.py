"""Tests for SessionManager: persistence, recovery and lifecycle."""

import asyncio

import pytest

from tests.conftest import FIXED_NOW, FailingCardStore, make_card
from vocabcards.adapters.memory_card_store import InMemoryCardStore
from vocabcards.domain.entities.session import InvalidTransitionError
from vocabcards.domain.services.card_catalog import CardCatalog
from vocabcards.domain.services.selector import EmptyPoolError
from vocabcards.domain.services.session_manager import SessionManager, SessionNotFoundError
from vocabcards.domain.value_objects.card_filter import CardFilter
from vocabcards.domain.value_objects.quiz_mode import QuizMode
from vocabcards.domain.value_objects.session_state import SessionState
from vocabcards.infrastructure.recovery_store import RecoveryStore, RecoveryStoreError


class BrokenQueueStore(RecoveryStore):
    """Recovery store that cannot queue outcomes."""

    async def save_update(self, *args, **kwargs) -> int:
        raise RecoveryStoreError("database is locked")


def make_manager(store, recovery_store=None, rng=None, size=20) -> SessionManager:
    return SessionManager(
        card_store=store,
        recovery_store=recovery_store,
        rng=rng,
        clock=lambda: FIXED_NOW,
        default_size=size,
    )


async def run_through(manager: SessionManager, session_id: str, answers: list[bool]) -> list:
    results = []
    for answer in answers:
        manager.reveal(session_id)
        results.append(await manager.judge(session_id, answer))
    return results


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------


class TestStartSession:
    def test_draws_from_filtered_pool(self, store, rng):
        manager = make_manager(store, rng=rng)
        result = asyncio.run(manager.start_session(CardFilter.weak()))
        assert {c.id for c in result.session.cards} == {"b", "d"}
        assert manager.has_active_session

    def test_default_size_caps_queue(self, rng):
        store = InMemoryCardStore([make_card(str(i)) for i in range(10)])
        manager = make_manager(store, rng=rng, size=4)
        assert asyncio.run(manager.start_session()).session.total == 4
        assert asyncio.run(manager.start_session(size=7)).session.total == 7

    def test_empty_pool(self, rng):
        manager = make_manager(InMemoryCardStore([make_card("a")]), rng=rng)
        with pytest.raises(EmptyPoolError):
            asyncio.run(manager.start_session(CardFilter.favorites()))
        assert manager.current_session is None

    def test_genre_pool(self, store, rng):
        manager = make_manager(store, rng=rng)
        result = asyncio.run(manager.start_session(CardFilter.for_genre("food")))
        assert {c.id for c in result.session.cards} == {"a", "c"}

    def test_reverse_mode_cues_first_prompt(self, store, rng):
        manager = make_manager(store, rng=rng)
        result = asyncio.run(manager.start_session(mode=QuizMode.TARGET_TO_NATIVE))
        first = result.session.current_card()
        assert [cue.text for cue in result.cues] == [first.target_text]

    def test_new_session_abandons_previous(self, store, rng):
        manager = make_manager(store, rng=rng)
        first = asyncio.run(manager.start_session()).session
        second = asyncio.run(manager.start_session()).session
        assert first.state is SessionState.ABANDONED
        assert manager.current_session is second
        with pytest.raises(SessionNotFoundError):
            manager.reveal(first.id)


# ---------------------------------------------------------------------------
# Judging and persistence
# ---------------------------------------------------------------------------


class TestJudge:
    def test_outcomes_persisted_before_return(self, store, rng):
        manager = make_manager(store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            order = [c.id for c in session.cards]
            await run_through(manager, session.id, [False, True, True, False])
            return order

        order = asyncio.run(scenario())
        stored = {c.id: c for c in asyncio.run(store.get_all())}
        initial = {"a": 0, "b": 2, "c": 0, "d": 1}
        expected = {
            order[0]: initial[order[0]] + 1,
            order[1]: max(0, initial[order[1]] - 1),
            order[2]: max(0, initial[order[2]] - 1),
            order[3]: initial[order[3]] + 1,
        }
        assert {cid: c.wrong_count for cid, c in stored.items()} == expected
        assert all(c.last_answered == FIXED_NOW for c in stored.values())

    def test_completion_closes_session(self, rng):
        store = InMemoryCardStore([make_card("a"), make_card("b")])
        manager = make_manager(store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            results = await run_through(manager, session.id, [True, False])
            return session, results

        session, results = asyncio.run(scenario())
        assert results[-1].judgment.is_complete
        assert not manager.has_active_session
        summary = manager.summary(session.id)
        assert (summary.correct, summary.total, summary.percent) == (1, 2, 50)

    def test_judge_unrevealed_rejected(self, store, rng):
        manager = make_manager(store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            await manager.judge(session.id, True)

        with pytest.raises(InvalidTransitionError):
            asyncio.run(scenario())
        assert all(c.last_answered is None for c in asyncio.run(store.get_all()))

    def test_unknown_session(self, store):
        manager = make_manager(store)
        with pytest.raises(SessionNotFoundError):
            manager.hint("missing")

    def test_failed_write_is_reported_and_queued(self, recovery_store, rng):
        store = FailingCardStore([make_card("a", wrong_count=1), make_card("b")])
        manager = make_manager(store, recovery_store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            manager.reveal(session.id)
            result = await manager.judge(session.id, False)
            return session, result, await recovery_store.get_pending_updates()

        session, result, pending = asyncio.run(scenario())
        assert result.persisted is False
        assert "disk full" in result.error
        assert session.current_index == 1
        assert len(pending) == 1
        assert pending[0].card_id == session.cards[0].id
        assert pending[0].session_id == session.id

    def test_deleted_card_is_not_queued(self, recovery_store, rng):
        store = InMemoryCardStore([make_card("a"), make_card("b")])
        manager = make_manager(store, recovery_store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            await store.delete(session.cards[0].id)
            manager.reveal(session.id)
            result = await manager.judge(session.id, True)
            return result, await recovery_store.get_pending_count()

        result, pending = asyncio.run(scenario())
        assert result.persisted is False
        assert pending == 0


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------


class TestRecovery:
    def test_queued_writes_replayed_on_next_start(self, recovery_store, rng):
        store = FailingCardStore([make_card("a")])
        manager = make_manager(store, recovery_store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            manager.reveal(session.id)
            await manager.judge(session.id, False)
            store.failing = False
            result = await manager.start_session()
            return result, await recovery_store.get_pending_count()

        result, pending = asyncio.run(scenario())
        assert result.recovered_updates == 1
        assert pending == 0
        card = asyncio.run(store.get_by_id("a"))
        assert card.wrong_count == 1
        assert card.last_answered == FIXED_NOW

    def test_still_failing_writes_stay_queued(self, recovery_store, rng):
        store = FailingCardStore([make_card("a")])
        manager = make_manager(store, recovery_store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            manager.reveal(session.id)
            await manager.judge(session.id, True)
            await manager.start_session()
            return await recovery_store.get_pending_updates()

        pending = asyncio.run(scenario())
        assert len(pending) == 1
        assert pending[0].retry_count == 1

    def test_reset_after_failed_write_is_not_overwritten(self, recovery_store, rng):
        store = FailingCardStore([make_card("x", wrong_count=2)])
        manager = make_manager(store, recovery_store, rng=rng)
        catalog = CardCatalog(store, recovery_store)

        async def scenario():
            session = (await manager.start_session()).session
            manager.reveal(session.id)
            await manager.judge(session.id, False)
            store.failing = False
            await catalog.reset_weak()
            result = await manager.start_session()
            return result, await recovery_store.get_pending_count()

        result, pending = asyncio.run(scenario())
        assert result.recovered_updates == 0
        assert pending == 0
        assert asyncio.run(store.get_by_id("x")).wrong_count == 0

    def test_later_judgment_retires_queued_write(self, recovery_store, rng):
        store = FailingCardStore([make_card("x", wrong_count=2)])
        manager = make_manager(store, recovery_store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            manager.reveal(session.id)
            await manager.judge(session.id, False)
            # Replay fails too, so the next draw still sees wrong_count 2
            session = (await manager.start_session()).session
            store.failing = False
            manager.reveal(session.id)
            judged = await manager.judge(session.id, True)
            pending = await recovery_store.get_pending_count()
            await manager.start_session()
            return judged, pending

        judged, pending = asyncio.run(scenario())
        assert judged.persisted
        assert judged.judgment.new_wrong_count == 1
        assert pending == 0
        assert asyncio.run(store.get_by_id("x")).wrong_count == 1

    def test_queueing_failure_still_reports_unsaved(self, tmp_path, rng):
        store = FailingCardStore([make_card("a"), make_card("b")])
        manager = make_manager(store, BrokenQueueStore(str(tmp_path / "r.db")), rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            manager.reveal(session.id)
            return session, await manager.judge(session.id, False)

        session, result = asyncio.run(scenario())
        assert not result.persisted
        assert result.error == "disk full"
        assert session.current_index == 1


# ---------------------------------------------------------------------------
# Lifecycle and history
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_end_session_abandons_and_records(self, store, recovery_store, rng):
        manager = make_manager(store, recovery_store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            manager.reveal(session.id)
            await manager.judge(session.id, True)
            ended = await manager.end_session(session.id)
            return ended, await recovery_store.get_recent_sessions()

        ended, history = asyncio.run(scenario())
        assert ended.state is SessionState.ABANDONED
        assert manager.current_session is None
        assert history[0].id == ended.id
        assert history[0].state == "abandoned"
        assert (history[0].correct, history[0].judged) == (1, 1)

    def test_completed_session_recorded_once(self, recovery_store, rng):
        store = InMemoryCardStore([make_card("a")])
        manager = make_manager(store, recovery_store, rng=rng)

        async def scenario():
            session = (await manager.start_session()).session
            await run_through(manager, session.id, [True])
            await manager.end_session(session.id)
            return await recovery_store.get_recent_sessions()

        (record,) = asyncio.run(scenario())
        assert record.state == "complete"
        assert record.total == 1
        assert record.correct == 1

    def test_replay_uses_same_filter_and_mode(self, store, rng):
        manager = make_manager(store, rng=rng)

        async def scenario():
            first = (await manager.start_session(CardFilter.favorites(), QuizMode.TARGET_TO_NATIVE))
            return first.session, (await manager.replay_session(first.session.id)).session

        first, replay = asyncio.run(scenario())
        assert replay.id != first.id
        assert replay.card_filter == CardFilter.favorites()
        assert replay.mode is QuizMode.TARGET_TO_NATIVE

    def test_force_end(self, store, rng):
        manager = make_manager(store, rng=rng)
        assert asyncio.run(manager.force_end_all_sessions()) == 0
        asyncio.run(manager.start_session())
        assert asyncio.run(manager.force_end_all_sessions()) == 1
        assert manager.current_session is None
