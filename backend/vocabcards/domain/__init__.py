# Domain layer - Business logic (NO external dependencies)

from .entities import Card, InvalidTransitionError, QuizSession
from .value_objects import (
    AudioCue,
    CardFilter,
    CardPhase,
    QuizMode,
    SessionState,
    SessionSummary,
)

__all__ = [
    "AudioCue",
    "Card",
    "CardFilter",
    "CardPhase",
    "InvalidTransitionError",
    "QuizMode",
    "QuizSession",
    "SessionState",
    "SessionSummary",
]
