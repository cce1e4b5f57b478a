"""Domain entities - objects with identity."""

from .card import Card, CardDict, split_genres
from .session import InvalidTransitionError, Judgment, QuizSession, Reveal

__all__ = [
    "Card",
    "CardDict",
    "InvalidTransitionError",
    "Judgment",
    "QuizSession",
    "Reveal",
    "split_genres",
]
