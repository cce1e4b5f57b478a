"""In-memory card store for development and testing.

Optionally seeded from the embedded sample deck.
Use CARD_STORE=memory to enable.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from vocabcards.domain.entities.card import Card
from vocabcards.ports.card_store import CardNotFoundError

logger = logging.getLogger(__name__)


def load_sample_deck() -> list[Card]:
    """Load cards from the embedded JSON sample deck.

    Uses importlib.resources for reliable package data access.
    Falls back to file path if running outside package context.
    """
    try:
        data_path = resources.files("vocabcards.adapters.data").joinpath("sample_deck.json")
        with data_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (ModuleNotFoundError, FileNotFoundError, TypeError):
        file_path = Path(__file__).parent / "data" / "sample_deck.json"
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)

    return [Card.from_dict(card_data) for card_data in data["cards"]]


class InMemoryCardStore:
    """CardStore implementation backed by a dict.

    Changes are not persisted between restarts.
    """

    def __init__(self, cards: list[Card] | None = None, seed_sample: bool = False) -> None:
        self._cards: dict[str, Card] = {}
        initial = list(cards or [])
        if seed_sample:
            initial.extend(load_sample_deck())
        for card in initial:
            self._cards[card.id] = card

    async def get_all(self) -> list[Card]:
        return list(self._cards.values())

    async def get_by_id(self, card_id: str) -> Card:
        try:
            return self._cards[card_id]
        except KeyError:
            raise CardNotFoundError(card_id) from None

    async def update_by_id(self, card_id: str, fields: dict[str, Any]) -> Card:
        card = await self.get_by_id(card_id)
        updated = card.with_updates(fields)
        self._cards[card_id] = updated
        return updated

    async def add(self, card: Card) -> Card:
        self._cards[card.id] = card
        return card

    async def delete(self, card_id: str) -> None:
        self._cards.pop(card_id, None)

    async def delete_all(self) -> None:
        self._cards.clear()

    async def import_cards(self, cards: list[Card]) -> int:
        for card in cards:
            self._cards[card.id] = card
        logger.info(f"Imported {len(cards)} cards into memory store")
        return len(cards)

    async def close(self) -> None:
        """No-op cleanup."""
        pass
