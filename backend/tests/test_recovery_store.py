"""Tests for the recovery store (queued writes and session history)."""

import asyncio
import sqlite3
from datetime import UTC, datetime, timedelta

import pytest

from tests.conftest import FIXED_NOW
from vocabcards.infrastructure.recovery_store import RecoveryStore, RecoveryStoreError


class TestPendingUpdates:
    def test_save_and_list_in_order(self, recovery_store):
        async def scenario():
            await recovery_store.save_update("a", 2, FIXED_NOW, "s1")
            await recovery_store.save_update("b", 0, FIXED_NOW, "s1")
            return await recovery_store.get_pending_updates()

        pending = asyncio.run(scenario())
        assert [p.card_id for p in pending] == ["a", "b"]
        assert pending[0].fields == {"wrong_count": 2, "last_answered": FIXED_NOW}
        assert pending[0].retry_count == 0

    def test_mark_synced_and_discard(self, recovery_store):
        async def scenario():
            first = await recovery_store.save_update("a", 1, FIXED_NOW, "s1")
            second = await recovery_store.save_update("b", 1, FIXED_NOW, "s1")
            await recovery_store.save_update("c", 1, FIXED_NOW, "s1")
            await recovery_store.mark_synced(first)
            await recovery_store.discard(second)
            return await recovery_store.get_pending_updates()

        assert [p.card_id for p in asyncio.run(scenario())] == ["c"]
        assert asyncio.run(recovery_store.get_pending_count()) == 1

    def test_increment_retry(self, recovery_store):
        async def scenario():
            update_id = await recovery_store.save_update("a", 1, FIXED_NOW, "s1")
            await recovery_store.increment_retry(update_id)
            await recovery_store.increment_retry(update_id)
            return await recovery_store.get_pending_updates()

        assert asyncio.run(scenario())[0].retry_count == 2

    def test_survives_reopen(self, tmp_path):
        path = str(tmp_path / "recovery.db")
        asyncio.run(RecoveryStore(path).save_update("a", 1, FIXED_NOW, "s1"))
        assert asyncio.run(RecoveryStore(path).get_pending_count()) == 1

    def test_discard_for_card_keeps_other_cards(self, recovery_store):
        async def scenario():
            await recovery_store.save_update("a", 1, FIXED_NOW, "s1")
            synced = await recovery_store.save_update("a", 2, FIXED_NOW, "s1")
            await recovery_store.save_update("b", 1, FIXED_NOW, "s1")
            await recovery_store.save_update("a", 3, FIXED_NOW, "s2")
            await recovery_store.mark_synced(synced)
            dropped = await recovery_store.discard_for_card("a")
            return dropped, await recovery_store.get_pending_updates()

        dropped, pending = asyncio.run(scenario())
        assert dropped == 2
        assert [p.card_id for p in pending] == ["b"]

    def test_database_errors_raised_as_recovery_errors(self, tmp_path):
        path = str(tmp_path / "recovery.db")
        store = RecoveryStore(path)
        with sqlite3.connect(path) as conn:
            conn.execute("DROP TABLE pending_updates")

        with pytest.raises(RecoveryStoreError):
            asyncio.run(store.save_update("a", 1, FIXED_NOW, "s1"))


class TestSessionHistory:
    def test_start_and_end(self, recovery_store):
        async def scenario():
            await recovery_store.save_session("s1", "_weak", "native-target", "active", FIXED_NOW, 5)
            await recovery_store.end_session("s1", "complete", correct=4, judged=5, writes_failed=1)
            return await recovery_store.get_recent_sessions()

        (record,) = asyncio.run(scenario())
        assert record.filter_key == "_weak"
        assert record.state == "complete"
        assert (record.total, record.correct, record.judged, record.writes_failed) == (5, 4, 5, 1)
        assert record.ended_at is not None

    def test_newest_first_with_limit(self, recovery_store):
        async def scenario():
            for i in range(3):
                started = datetime(2026, 1, 1, tzinfo=UTC) + timedelta(days=i)
                await recovery_store.save_session(f"s{i}", "all", "native-target", "active", started, 1)
            return await recovery_store.get_recent_sessions(limit=2)

        assert [r.id for r in asyncio.run(scenario())] == ["s2", "s1"]

    def test_reset_stale_sessions(self, recovery_store):
        async def scenario():
            await recovery_store.save_session("s1", "all", "native-target", "active", FIXED_NOW, 3)
            await recovery_store.save_session("s2", "all", "native-target", "active", FIXED_NOW, 3)
            await recovery_store.end_session("s2", "complete", 3, 3, 0)
            reset = await recovery_store.reset_stale_sessions()
            return reset, await recovery_store.get_recent_sessions()

        reset, records = asyncio.run(scenario())
        assert reset == 1
        assert {r.id: r.state for r in records} == {"s1": "abandoned", "s2": "complete"}
