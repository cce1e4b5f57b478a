# Adapters layer - Concrete CardStore implementations (SQLite, in-memory)

from .memory_card_store import InMemoryCardStore, load_sample_deck
from .sqlite_card_store import SqliteCardStore, StoreBusyError

__all__ = [
    "InMemoryCardStore",
    "SqliteCardStore",
    "StoreBusyError",
    "load_sample_deck",
]
