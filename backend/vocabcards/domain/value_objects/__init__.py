"""Domain value objects - immutable objects without identity."""

from .audio_cue import AudioCue, VoiceSettings
from .card_filter import CardFilter, FilterKind
from .collection_stats import CollectionStats, FilterOption
from .quiz_mode import QuizMode
from .session_state import CardPhase, SessionState
from .session_summary import SessionSummary, score_percent

__all__ = [
    "AudioCue",
    "CardFilter",
    "CardPhase",
    "CollectionStats",
    "FilterKind",
    "FilterOption",
    "QuizMode",
    "SessionState",
    "SessionSummary",
    "VoiceSettings",
    "score_percent",
]
