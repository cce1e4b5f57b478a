"""SQLite-based recovery store for failed outcome writes and session history.

Persists judgment results that couldn't be written to the card store,
allowing replay at the next session start. Also stores session history
for stats tracking. Uses async-safe operations with threading.
"""

import asyncio
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path


class RecoveryStoreError(Exception):
    """Raised when the recovery database cannot be read or written."""

    pass


@dataclass
class PendingUpdate:
    """Outcome write waiting to reach the card store."""

    id: int
    card_id: str
    wrong_count: int
    last_answered: datetime
    session_id: str
    retry_count: int

    @property
    def fields(self) -> dict:
        """Partial card fields to replay."""
        return {"wrong_count": self.wrong_count, "last_answered": self.last_answered}


@dataclass
class SessionRecord:
    """Session record for history tracking."""

    id: str
    filter_key: str
    mode: str
    state: str
    started_at: datetime
    ended_at: datetime | None
    total: int
    correct: int
    judged: int
    writes_failed: int


class RecoveryStore:
    """SQLite-based recovery store.

    Thread-safe async operations using asyncio.Lock and to_thread.
    """

    def __init__(self, db_path: str = "recovery.db"):
        """Initialize recovery store.

        Args:
            db_path: Path to SQLite database file

        Database tables are created synchronously on construction.
        """
        self._db_path = Path(db_path)
        self._lock = asyncio.Lock()
        self._init_db()

    async def _run(self, func, *args):
        """Run a blocking operation in a thread, mapping sqlite errors."""
        async with self._lock:
            try:
                return await asyncio.to_thread(func, *args)
            except sqlite3.Error as e:
                raise RecoveryStoreError(str(e)) from e

    def _connect(self) -> sqlite3.Connection:
        """Create SQLite connection with relaxed sync for a local file."""
        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA temp_store=MEMORY")
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS pending_updates (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    card_id TEXT NOT NULL,
                    wrong_count INTEGER NOT NULL,
                    last_answered TEXT NOT NULL,
                    session_id TEXT NOT NULL,
                    retry_count INTEGER DEFAULT 0,
                    synced_at TEXT
                )
            """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_pending_unsynced
                ON pending_updates(synced_at) WHERE synced_at IS NULL
            """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    filter_key TEXT NOT NULL,
                    mode TEXT NOT NULL,
                    state TEXT NOT NULL,
                    started_at TEXT NOT NULL,
                    ended_at TEXT,
                    total INTEGER DEFAULT 0,
                    correct INTEGER DEFAULT 0,
                    judged INTEGER DEFAULT 0,
                    writes_failed INTEGER DEFAULT 0
                )
            """
            )

    # --- Pending outcome writes ---

    async def save_update(
        self,
        card_id: str,
        wrong_count: int,
        last_answered: datetime,
        session_id: str,
    ) -> int:
        """Queue a failed outcome write (async-safe).

        Returns:
            ID of the saved record
        """
        return await self._run(
            self._save_update_sync, card_id, wrong_count, last_answered, session_id
        )

    def _save_update_sync(
        self,
        card_id: str,
        wrong_count: int,
        last_answered: datetime,
        session_id: str,
    ) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO pending_updates (card_id, wrong_count, last_answered, session_id)
                VALUES (?, ?, ?, ?)
                """,
                (card_id, wrong_count, last_answered.isoformat(), session_id),
            )
            return cursor.lastrowid or 0

    async def get_pending_updates(self) -> list[PendingUpdate]:
        """Get all unsynced writes, oldest first."""
        return await self._run(self._get_pending_sync)

    def _get_pending_sync(self) -> list[PendingUpdate]:
        with self._connect() as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                """
                SELECT * FROM pending_updates
                WHERE synced_at IS NULL
                ORDER BY id ASC
                """
            ).fetchall()
            return [
                PendingUpdate(
                    id=row["id"],
                    card_id=row["card_id"],
                    wrong_count=row["wrong_count"],
                    last_answered=datetime.fromisoformat(row["last_answered"]),
                    session_id=row["session_id"],
                    retry_count=row["retry_count"],
                )
                for row in rows
            ]

    async def mark_synced(self, update_id: int) -> None:
        """Mark a queued write as applied."""
        await self._run(self._mark_synced_sync, update_id)

    def _mark_synced_sync(self, update_id: int) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE pending_updates SET synced_at = ? WHERE id = ?",
                (datetime.now(UTC).isoformat(), update_id),
            )

    async def increment_retry(self, update_id: int) -> None:
        """Increment retry count for a failed replay."""
        await self._run(self._increment_retry_sync, update_id)

    def _increment_retry_sync(self, update_id: int) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE pending_updates SET retry_count = retry_count + 1 WHERE id = ?",
                (update_id,),
            )

    async def discard(self, update_id: int) -> None:
        """Drop a queued write that can never apply (card deleted)."""
        await self._run(self._discard_sync, update_id)

    def _discard_sync(self, update_id: int) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM pending_updates WHERE id = ?", (update_id,))

    async def discard_for_card(self, card_id: str) -> int:
        """Drop every unsynced write for a card.

        Called once a newer value for the card has been saved, so a stale
        queued write can never overwrite it.

        Returns:
            Number of writes dropped
        """
        return await self._run(self._discard_for_card_sync, card_id)

    def _discard_for_card_sync(self, card_id: str) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM pending_updates WHERE card_id = ? AND synced_at IS NULL",
                (card_id,),
            )
            return cursor.rowcount

    async def get_pending_count(self) -> int:
        """Get count of queued writes."""
        return await self._run(self._get_pending_count_sync)

    def _get_pending_count_sync(self) -> int:
        with self._connect() as conn:
            result = conn.execute(
                "SELECT COUNT(*) FROM pending_updates WHERE synced_at IS NULL"
            ).fetchone()
            return result[0] if result else 0

    # --- Session history ---

    async def save_session(
        self,
        session_id: str,
        filter_key: str,
        mode: str,
        state: str,
        started_at: datetime,
        total: int,
    ) -> None:
        """Record a session start."""
        await self._run(
            self._save_session_sync, session_id, filter_key, mode, state, started_at, total
        )

    def _save_session_sync(
        self,
        session_id: str,
        filter_key: str,
        mode: str,
        state: str,
        started_at: datetime,
        total: int,
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO sessions (id, filter_key, mode, state, started_at, total)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    state = excluded.state,
                    total = excluded.total
                """,
                (session_id, filter_key, mode, state, started_at.isoformat(), total),
            )

    async def end_session(
        self,
        session_id: str,
        state: str,
        correct: int,
        judged: int,
        writes_failed: int,
    ) -> None:
        """Mark session as ended with final counts."""
        await self._run(
            self._end_session_sync, session_id, state, correct, judged, writes_failed
        )

    def _end_session_sync(
        self,
        session_id: str,
        state: str,
        correct: int,
        judged: int,
        writes_failed: int,
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE sessions
                SET state = ?,
                    ended_at = ?,
                    correct = ?,
                    judged = ?,
                    writes_failed = ?
                WHERE id = ?
                """,
                (
                    state,
                    datetime.now(UTC).isoformat(),
                    correct,
                    judged,
                    writes_failed,
                    session_id,
                ),
            )

    async def get_recent_sessions(self, limit: int = 20) -> list[SessionRecord]:
        """Get the most recent sessions, newest first."""
        return await self._run(self._get_recent_sessions_sync, limit)

    def _get_recent_sessions_sync(self, limit: int) -> list[SessionRecord]:
        with self._connect() as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                """
                SELECT * FROM sessions
                ORDER BY started_at DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
            return [self._row_to_session(row) for row in rows]

    async def reset_stale_sessions(self) -> int:
        """Mark sessions left active by a crash as abandoned.

        Called on startup.

        Returns:
            Number of sessions reset
        """
        return await self._run(self._reset_stale_sessions_sync)

    def _reset_stale_sessions_sync(self) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE sessions
                SET state = 'abandoned',
                    ended_at = ?
                WHERE state = 'active'
                AND ended_at IS NULL
                """,
                (datetime.now(UTC).isoformat(),),
            )
            return cursor.rowcount

    def _row_to_session(self, row: sqlite3.Row) -> SessionRecord:
        """Convert database row to SessionRecord."""
        return SessionRecord(
            id=row["id"],
            filter_key=row["filter_key"],
            mode=row["mode"],
            state=row["state"],
            started_at=datetime.fromisoformat(row["started_at"]),
            ended_at=(datetime.fromisoformat(row["ended_at"]) if row["ended_at"] else None),
            total=row["total"],
            correct=row["correct"],
            judged=row["judged"],
            writes_failed=row["writes_failed"],
        )
