"""Application configuration loaded from environment variables.

Provides type-safe access to configuration with sensible defaults.
"""

import logging
import os
from pathlib import Path

from vocabcards.domain.constants import (
    DEFAULT_SESSION_SIZE,
    DEFAULT_TTS_LANG,
    DEFAULT_TTS_RATE,
    MAX_TTS_RATE,
    MIN_TTS_RATE,
)

logger = logging.getLogger(__name__)

DATA_DIR = Path.home() / ".vocabcards"


def get_cors_origins() -> list[str]:
    """Get allowed CORS origins from environment.

    Environment variable: CORS_ORIGINS (comma-separated)
    Default: common local dev server ports
    """
    default_origins = "http://localhost:3000,http://localhost:5173,http://localhost:8080"
    origins_str = os.getenv("CORS_ORIGINS", default_origins)
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def get_cors_allow_credentials() -> bool:
    """Get CORS allow_credentials setting.

    Environment variable: CORS_ALLOW_CREDENTIALS
    Default: true
    """
    return os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"


# Restricted HTTP methods - only what the API actually uses
CORS_ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]

# Restricted headers - only what's needed for the API
CORS_ALLOWED_HEADERS = [
    "Accept",
    "Accept-Language",
    "Content-Type",
    "X-Requested-With",
]


def get_log_level() -> str:
    """Get logging level name (LOG_LEVEL, default INFO)."""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_card_store_type() -> str:
    """Get card store adapter type from environment.

    Options:
        - 'sqlite': Persistent SQLite file (default)
        - 'memory': In-memory store seeded with the sample deck
    """
    return os.getenv("CARD_STORE", "sqlite").lower()


def get_card_db_path() -> str:
    """Get card database path (CARD_DB_PATH)."""
    return os.getenv("CARD_DB_PATH", str(DATA_DIR / "cards.db"))


def get_recovery_db_path() -> str:
    """Get recovery database path (RECOVERY_DB_PATH)."""
    return os.getenv("RECOVERY_DB_PATH", str(DATA_DIR / "recovery.db"))


def get_session_size() -> int:
    """Get default quiz session size (QUIZ_SESSION_SIZE, default 20)."""
    raw = os.getenv("QUIZ_SESSION_SIZE", str(DEFAULT_SESSION_SIZE))
    try:
        size = int(raw)
    except ValueError:
        logger.warning(f"Invalid QUIZ_SESSION_SIZE '{raw}', using {DEFAULT_SESSION_SIZE}")
        return DEFAULT_SESSION_SIZE
    return max(1, size)


def get_tts_lang() -> str:
    """Get utterance language tag (TTS_LANG)."""
    return os.getenv("TTS_LANG", DEFAULT_TTS_LANG)


def get_tts_rate() -> float:
    """Get speaking rate (TTS_RATE), clamped to the supported range."""
    raw = os.getenv("TTS_RATE", str(DEFAULT_TTS_RATE))
    try:
        rate = float(raw)
    except ValueError:
        logger.warning(f"Invalid TTS_RATE '{raw}', using {DEFAULT_TTS_RATE}")
        return DEFAULT_TTS_RATE
    return min(MAX_TTS_RATE, max(MIN_TTS_RATE, rate))


def get_tts_voice() -> str | None:
    """Get preferred voice URI (TTS_VOICE), None for the platform default."""
    return os.getenv("TTS_VOICE") or None


def get_host() -> str:
    return os.getenv("HOST", "127.0.0.1")


def get_port() -> int:
    return int(os.getenv("PORT", "8000"))
