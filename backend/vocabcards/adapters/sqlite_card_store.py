"""SQLite card store adapter.

Persistent CardStore implementation for a single local user. Blocking
sqlite3 calls run in worker threads behind an asyncio.Lock.
"""

import asyncio
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from vocabcards.domain.entities.card import Card
from vocabcards.infrastructure.retry import TransientError, with_retry
from vocabcards.ports.card_store import CardNotFoundError, CardStoreError

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id",
    "native_text",
    "target_text",
    "pronunciation",
    "genre",
    "memo",
    "favorite",
    "wrong_count",
    "last_answered",
)

_COLUMN_LIST = ", ".join(_COLUMNS)
_PLACEHOLDERS = ", ".join("?" for _ in _COLUMNS)
_UPDATE_SET = ", ".join(f"{c} = excluded.{c}" for c in _COLUMNS if c != "id")

_UPSERT_SQL = (
    f"INSERT INTO cards ({_COLUMN_LIST}) VALUES ({_PLACEHOLDERS}) "
    f"ON CONFLICT(id) DO UPDATE SET {_UPDATE_SET}"
)


class StoreBusyError(TransientError, CardStoreError):
    """Database file stayed locked; retried, then surfaced as a store error."""

    pass


def _is_locked(error: sqlite3.OperationalError) -> bool:
    message = str(error).lower()
    return "locked" in message or "busy" in message


def _card_to_row(card: Card) -> tuple:
    return (
        card.id,
        card.native_text,
        card.target_text,
        card.pronunciation,
        card.genre,
        card.memo,
        int(card.favorite),
        card.wrong_count,
        card.last_answered.isoformat() if card.last_answered else None,
    )


def _row_to_card(row: sqlite3.Row) -> Card:
    return Card(
        id=row["id"],
        native_text=row["native_text"],
        target_text=row["target_text"],
        pronunciation=row["pronunciation"] or "",
        genre=row["genre"] or "",
        memo=row["memo"] or "",
        favorite=bool(row["favorite"]),
        wrong_count=row["wrong_count"],
        last_answered=(
            datetime.fromisoformat(row["last_answered"]) if row["last_answered"] else None
        ),
    )


class SqliteCardStore:
    """CardStore implementation backed by a SQLite file.

    Thread-safe async operations using asyncio.Lock and to_thread.
    """

    def __init__(self, db_path: str = "cards.db", timeout: float = 5.0):
        """Initialize the store and create the schema.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds sqlite waits on a locked file before failing
        """
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._lock = asyncio.Lock()
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cards (
                    id TEXT PRIMARY KEY,
                    native_text TEXT NOT NULL,
                    target_text TEXT NOT NULL,
                    pronunciation TEXT DEFAULT '',
                    genre TEXT DEFAULT '',
                    memo TEXT DEFAULT '',
                    favorite INTEGER DEFAULT 0,
                    wrong_count INTEGER DEFAULT 0 CHECK (wrong_count >= 0),
                    last_answered TEXT,
                    created_seq INTEGER
                )
            """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_cards_wrong_count ON cards(wrong_count)"
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_cards_favorite ON cards(favorite)")

    async def _run(self, func, *args):
        """Run a blocking operation in a thread, mapping sqlite errors."""
        async with self._lock:
            try:
                return await asyncio.to_thread(func, *args)
            except sqlite3.OperationalError as e:
                if _is_locked(e):
                    raise StoreBusyError(str(e)) from e
                raise CardStoreError(str(e)) from e
            except sqlite3.DatabaseError as e:
                raise CardStoreError(str(e)) from e

    # --- Reads ---

    @with_retry()
    async def get_all(self) -> list[Card]:
        return await self._run(self._get_all_sync)

    def _get_all_sync(self) -> list[Card]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMN_LIST} FROM cards ORDER BY created_seq, rowid"
            ).fetchall()
            return [_row_to_card(row) for row in rows]

    @with_retry()
    async def get_by_id(self, card_id: str) -> Card:
        card = await self._run(self._get_by_id_sync, card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    def _get_by_id_sync(self, card_id: str) -> Card | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMN_LIST} FROM cards WHERE id = ?", (card_id,)
            ).fetchone()
            return _row_to_card(row) if row else None

    # --- Writes ---

    @with_retry()
    async def update_by_id(self, card_id: str, fields: dict[str, Any]) -> Card:
        card = await self._run(self._update_sync, card_id, fields)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    def _update_sync(self, card_id: str, fields: dict[str, Any]) -> Card | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMN_LIST} FROM cards WHERE id = ?", (card_id,)
            ).fetchone()
            if row is None:
                return None
            updated = _row_to_card(row).with_updates(fields)
            conn.execute(_UPSERT_SQL, _card_to_row(updated))
            return updated

    @with_retry()
    async def add(self, card: Card) -> Card:
        await self._run(self._upsert_many_sync, [card])
        return card

    @with_retry()
    async def import_cards(self, cards: list[Card]) -> int:
        count = await self._run(self._upsert_many_sync, cards)
        logger.info(f"Imported {count} cards into {self._db_path}")
        return count

    def _upsert_many_sync(self, cards: list[Card]) -> int:
        with self._connect() as conn:
            seq = conn.execute("SELECT COALESCE(MAX(created_seq), 0) FROM cards").fetchone()[0]
            for card in cards:
                seq += 1
                conn.execute(_UPSERT_SQL, _card_to_row(card))
                conn.execute(
                    "UPDATE cards SET created_seq = ? WHERE id = ? AND created_seq IS NULL",
                    (seq, card.id),
                )
            return len(cards)

    @with_retry()
    async def delete(self, card_id: str) -> None:
        await self._run(self._delete_sync, card_id)

    def _delete_sync(self, card_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM cards WHERE id = ?", (card_id,))

    @with_retry()
    async def delete_all(self) -> None:
        await self._run(self._delete_all_sync)

    def _delete_all_sync(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM cards")

    async def close(self) -> None:
        """No-op since connections are short-lived per operation."""
        pass
