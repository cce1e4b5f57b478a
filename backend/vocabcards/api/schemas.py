"""Shared API response models."""

from datetime import datetime

from pydantic import BaseModel

from vocabcards.domain.entities.card import Card
from vocabcards.domain.value_objects.audio_cue import AudioCue


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str
    details: dict | None = None


class ErrorResponse(BaseModel):
    """Error response wrapper."""

    error: ErrorDetail


class CardResponse(BaseModel):
    """Card in API response."""

    id: str
    native_text: str
    target_text: str
    pronunciation: str
    genre: str
    genres: list[str]
    memo: str
    favorite: bool
    wrong_count: int
    last_answered: datetime | None = None

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            id=card.id,
            native_text=card.native_text,
            target_text=card.target_text,
            pronunciation=card.pronunciation,
            genre=card.genre,
            genres=card.genres,
            memo=card.memo,
            favorite=card.favorite,
            wrong_count=card.wrong_count,
            last_answered=card.last_answered,
        )


class AudioCueResponse(BaseModel):
    """Text the client should speak."""

    text: str
    lang: str
    rate: float
    voice: str | None = None

    @classmethod
    def from_cues(cls, cues: tuple[AudioCue, ...]) -> list["AudioCueResponse"]:
        return [cls(**cue.to_dict()) for cue in cues]


def error_detail(code: str, message: str, details: dict | None = None) -> dict:
    """Build the HTTPException detail body shared by all routes."""
    error: dict = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}
