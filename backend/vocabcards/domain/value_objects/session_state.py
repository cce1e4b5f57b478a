"""Session state value objects for quiz session lifecycle management."""

from enum import StrEnum


class SessionState(StrEnum):
    """Quiz session lifecycle states.

    State machine:
        SETUP -> ACTIVE -> COMPLETE
                   |
                   v
               ABANDONED

    States:
        SETUP: Pool and size chosen, cards not yet drawn
        ACTIVE: Reviewing cards
        COMPLETE: Every drawn card has been judged
        ABANDONED: User quit before the last card
    """

    SETUP = "setup"
    ACTIVE = "active"
    COMPLETE = "complete"
    ABANDONED = "abandoned"

    def is_active(self) -> bool:
        """Check if session is in the review loop."""
        return self is SessionState.ACTIVE


class CardPhase(StrEnum):
    """Micro-state of the current card within an ACTIVE session."""

    UNREVEALED = "unrevealed"
    REVEALED = "revealed"
