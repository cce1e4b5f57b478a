"""Outcome feedback: how a judgment moves a card's wrong count."""

from vocabcards.domain.entities.card import Card


def apply_outcome(card: Card, is_correct: bool) -> int:
    """Compute the card's new wrong count after a judgment.

    Correct answers pay one miss back (never below zero); incorrect
    answers add one, with no upper bound.
    """
    if is_correct:
        return max(0, card.wrong_count - 1)
    return card.wrong_count + 1
