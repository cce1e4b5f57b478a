"""Card entity representing one vocabulary pair."""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, TypedDict
from uuid import uuid4

from vocabcards.domain.constants import GENRE_SEPARATORS

_GENRE_SPLIT = re.compile("|".join(re.escape(sep) for sep in GENRE_SEPARATORS))

# Field names accepted by partial updates
UPDATABLE_FIELDS = frozenset(
    {
        "native_text",
        "target_text",
        "pronunciation",
        "genre",
        "memo",
        "favorite",
        "wrong_count",
        "last_answered",
    }
)

# camelCase keys used by legacy exports
_LEGACY_KEYS = {"wrongCount": "wrong_count", "lastAnswered": "last_answered"}


class CardDict(TypedDict):
    """Card data structure for serialization."""

    id: str
    native_text: str
    target_text: str
    pronunciation: str
    genre: str
    memo: str
    favorite: bool
    wrong_count: int
    last_answered: str | None


def split_genres(genre: str) -> list[str]:
    """Split a genre string on any supported comma, dropping blanks."""
    if not genre:
        return []
    return [g.strip() for g in _GENRE_SPLIT.split(genre) if g.strip()]


_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


def parse_flag(value: Any) -> bool:
    """Read a boolean from imported data.

    Accepts bools, None, 0/1 and the common string spellings.

    Raises:
        ValueError: For anything else
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"Expected a boolean flag, got {value!r}")


def new_card_id() -> str:
    """Generate a fresh card identifier."""
    return str(uuid4())


@dataclass(frozen=True)
class Card:
    """Vocabulary card entity.

    Attributes:
        id: Opaque identifier, stable for the card's lifetime
        native_text: Native-language side (required)
        target_text: Target-language side (required)
        pronunciation: Optional romanization / reading
        genre: Comma-delimited categories, may be empty
        memo: Optional note shown with the answer
        favorite: User flag, independent of quiz outcomes
        wrong_count: Difficulty signal used for selection weighting
        last_answered: When the card was last judged (advisory only)
    """

    native_text: str
    target_text: str
    id: str = field(default_factory=new_card_id)
    pronunciation: str = ""
    genre: str = ""
    memo: str = ""
    favorite: bool = False
    wrong_count: int = 0
    last_answered: datetime | None = None

    def __post_init__(self) -> None:
        """Validate required text and difficulty state."""
        if not self.id:
            raise ValueError("Card id must not be empty")
        if not self.native_text or not self.native_text.strip():
            raise ValueError("native_text must not be empty")
        if not self.target_text or not self.target_text.strip():
            raise ValueError("target_text must not be empty")
        if not isinstance(self.favorite, bool):
            raise ValueError(f"favorite must be a boolean, got {self.favorite!r}")
        if isinstance(self.wrong_count, bool) or not isinstance(self.wrong_count, int):
            raise ValueError(f"wrong_count must be an integer, got {self.wrong_count!r}")
        if self.wrong_count < 0:
            raise ValueError(f"wrong_count must be non-negative, got {self.wrong_count}")

    @property
    def genres(self) -> list[str]:
        """Categories this card belongs to."""
        return split_genres(self.genre)

    @property
    def is_weak(self) -> bool:
        """Check if card has outstanding misses."""
        return self.wrong_count > 0

    def in_genre(self, genre: str) -> bool:
        """Check genre membership (exact name match)."""
        return genre.strip() in self.genres

    def with_updates(self, fields: dict[str, Any]) -> "Card":
        """Return a copy with the given fields replaced.

        Raises:
            ValueError: If a field is unknown or the result is invalid
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown card fields: {sorted(unknown)}")
        updates = dict(fields)
        if isinstance(updates.get("last_answered"), str):
            updates["last_answered"] = datetime.fromisoformat(updates["last_answered"])
        return replace(self, **updates)

    def to_dict(self) -> CardDict:
        """Convert card to dictionary for serialization."""
        return {
            "id": self.id,
            "native_text": self.native_text,
            "target_text": self.target_text,
            "pronunciation": self.pronunciation,
            "genre": self.genre,
            "memo": self.memo,
            "favorite": self.favorite,
            "wrong_count": self.wrong_count,
            "last_answered": self.last_answered.isoformat() if self.last_answered else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        """Create from dictionary.

        Accepts both snake_case keys and the camelCase keys of legacy exports.
        A missing id gets a freshly generated one.
        """
        values = {_LEGACY_KEYS.get(k, k): v for k, v in data.items()}
        last_answered = values.get("last_answered")
        if isinstance(last_answered, str) and last_answered:
            last_answered = datetime.fromisoformat(last_answered)
        elif not isinstance(last_answered, datetime):
            last_answered = None
        return cls(
            id=values.get("id") or new_card_id(),
            native_text=values.get("native_text", ""),
            target_text=values.get("target_text", ""),
            pronunciation=values.get("pronunciation") or "",
            genre=values.get("genre") or "",
            memo=values.get("memo") or "",
            favorite=parse_flag(values.get("favorite")),
            wrong_count=int(values.get("wrong_count") or 0),
            last_answered=last_answered,
        )
