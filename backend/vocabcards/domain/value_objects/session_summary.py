"""Session summary value object."""

from dataclasses import dataclass

from vocabcards.domain.entities.card import Card
from vocabcards.domain.value_objects.card_filter import CardFilter
from vocabcards.domain.value_objects.quiz_mode import QuizMode


def score_percent(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half up."""
    if total <= 0:
        raise ValueError(f"total must be positive, got {total}")
    return int(100 * correct / total + 0.5)


@dataclass(frozen=True)
class SessionSummary:
    """Result of a completed quiz session.

    Attributes:
        correct: Cards judged correct
        total: Cards drawn for the session (always > 0)
        wrong_cards: Cards judged incorrect, in judgment order
        card_filter: Pool the session was drawn from (for replay)
        mode: Direction the session was run in (for replay)
    """

    correct: int
    total: int
    wrong_cards: tuple[Card, ...]
    card_filter: CardFilter
    mode: QuizMode

    @property
    def percent(self) -> int:
        return score_percent(self.correct, self.total)

    @property
    def wrong_count(self) -> int:
        return self.total - self.correct

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "correct": self.correct,
            "total": self.total,
            "wrong": self.wrong_count,
            "percent": self.percent,
            "wrong_cards": [c.to_dict() for c in self.wrong_cards],
            "filter": self.card_filter.to_key(),
            "mode": self.mode.value,
        }
