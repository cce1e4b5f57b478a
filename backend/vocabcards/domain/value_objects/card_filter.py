"""Card filter value object: which cards a quiz draws from."""

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from vocabcards.domain.constants import (
    FILTER_KEY_ALL,
    FILTER_KEY_FAVORITES,
    FILTER_KEY_WEAK,
)

if TYPE_CHECKING:
    from vocabcards.domain.entities.card import Card


class FilterKind(StrEnum):
    """Kinds of card pools."""

    ALL = "all"
    FAVORITES = "favorites"
    WEAK = "weak"
    GENRE = "genre"


@dataclass(frozen=True)
class CardFilter:
    """Selection key used to build a session's candidate pool.

    Kept on the session so a finished quiz can be replayed with the
    same pool.
    """

    kind: FilterKind = FilterKind.ALL
    genre: str | None = None

    def __post_init__(self) -> None:
        """Validate genre presence."""
        if self.kind is FilterKind.GENRE and not (self.genre and self.genre.strip()):
            raise ValueError("Genre filter requires a genre name")
        if self.kind is not FilterKind.GENRE and self.genre is not None:
            raise ValueError(f"{self.kind} filter does not take a genre")

    @classmethod
    def all(cls) -> "CardFilter":
        return cls(FilterKind.ALL)

    @classmethod
    def favorites(cls) -> "CardFilter":
        return cls(FilterKind.FAVORITES)

    @classmethod
    def weak(cls) -> "CardFilter":
        return cls(FilterKind.WEAK)

    @classmethod
    def for_genre(cls, genre: str) -> "CardFilter":
        return cls(FilterKind.GENRE, genre.strip())

    @classmethod
    def parse(cls, key: str | None) -> "CardFilter":
        """Parse a query key ("all", "_fav", "_weak" or a genre name).

        An empty or missing key means all cards.
        """
        key = (key or "").strip()
        if not key or key == FILTER_KEY_ALL:
            return cls.all()
        if key == FILTER_KEY_FAVORITES:
            return cls.favorites()
        if key == FILTER_KEY_WEAK:
            return cls.weak()
        return cls.for_genre(key)

    def to_key(self) -> str:
        """Inverse of parse."""
        if self.kind is FilterKind.FAVORITES:
            return FILTER_KEY_FAVORITES
        if self.kind is FilterKind.WEAK:
            return FILTER_KEY_WEAK
        if self.kind is FilterKind.GENRE:
            return self.genre or ""
        return FILTER_KEY_ALL

    def matches(self, card: "Card") -> bool:
        """Check whether card belongs to this pool."""
        if self.kind is FilterKind.FAVORITES:
            return card.favorite
        if self.kind is FilterKind.WEAK:
            return card.is_weak
        if self.kind is FilterKind.GENRE:
            return card.in_genre(self.genre or "")
        return True

    def apply(self, cards: list["Card"]) -> list["Card"]:
        """Filter cards, preserving order."""
        return [c for c in cards if self.matches(c)]

    def __str__(self) -> str:
        return self.to_key()
