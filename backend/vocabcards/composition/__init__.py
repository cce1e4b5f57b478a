"""
Composition Root.

Centralized dependency wiring for the application.
All factory functions that instantiate adapters belong here to maintain
hexagonal architecture (domain NEVER imports from adapters).
"""

import logging
from pathlib import Path

from vocabcards import config
from vocabcards.adapters.memory_card_store import InMemoryCardStore
from vocabcards.adapters.sqlite_card_store import SqliteCardStore
from vocabcards.domain.services.card_catalog import CardCatalog
from vocabcards.domain.services.session_manager import SessionManager
from vocabcards.domain.value_objects.audio_cue import VoiceSettings
from vocabcards.infrastructure.recovery_store import RecoveryStore
from vocabcards.ports.card_store import CardStore

logger = logging.getLogger(__name__)


def create_card_store(store_type: str | None = None, db_path: str | None = None) -> CardStore:
    """Create the configured CardStore adapter.

    Args:
        store_type: 'sqlite' or 'memory' (CARD_STORE if None)
        db_path: SQLite file path (CARD_DB_PATH if None)

    Raises:
        ValueError: If store_type is unknown
    """
    store_type = store_type or config.get_card_store_type()
    if store_type == "memory":
        logger.info("Using in-memory card store with sample deck")
        return InMemoryCardStore(seed_sample=True)
    if store_type == "sqlite":
        path = db_path or config.get_card_db_path()
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Using SQLite card store: {path}")
        return SqliteCardStore(path)
    raise ValueError(f"Invalid CARD_STORE: '{store_type}'. Valid options: 'sqlite', 'memory'")


def create_recovery_store(db_path: str | None = None) -> RecoveryStore:
    """Create RecoveryStore, making sure its directory exists."""
    path = db_path or config.get_recovery_db_path()
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return RecoveryStore(path)


def create_voice_settings() -> VoiceSettings:
    """Speech settings from TTS_* environment variables."""
    return VoiceSettings(
        lang=config.get_tts_lang(),
        rate=config.get_tts_rate(),
        voice=config.get_tts_voice(),
    )


def create_session_manager(
    card_store: CardStore,
    recovery_store: RecoveryStore | None = None,
) -> SessionManager:
    """Create SessionManager with configured size and voice."""
    return SessionManager(
        card_store=card_store,
        recovery_store=recovery_store,
        default_size=config.get_session_size(),
        voice=create_voice_settings(),
    )


def create_card_catalog(
    card_store: CardStore,
    recovery_store: RecoveryStore | None = None,
) -> CardCatalog:
    return CardCatalog(card_store, recovery_store)
