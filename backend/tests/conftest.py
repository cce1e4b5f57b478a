"""Shared fixtures and builders for the test suite."""

import random
from datetime import UTC, datetime
from typing import Any

import pytest

from vocabcards.adapters.memory_card_store import InMemoryCardStore
from vocabcards.domain.entities.card import Card
from vocabcards.infrastructure.recovery_store import RecoveryStore
from vocabcards.ports.card_store import CardStoreError

FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=UTC)


def make_card(card_id: str, wrong_count: int = 0, **fields: Any) -> Card:
    """Build a card with readable defaults derived from its id."""
    fields.setdefault("native_text", f"native {card_id}")
    fields.setdefault("target_text", f"target {card_id}")
    return Card(id=card_id, wrong_count=wrong_count, **fields)


class FailingCardStore(InMemoryCardStore):
    """In-memory store whose writes fail while `failing` is set."""

    def __init__(self, cards: list[Card] | None = None) -> None:
        super().__init__(cards)
        self.failing = True

    async def update_by_id(self, card_id: str, fields: dict[str, Any]) -> Card:
        if self.failing:
            raise CardStoreError("disk full")
        return await super().update_by_id(card_id, fields)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def cards() -> list[Card]:
    return [
        make_card("a", genre="food, basics"),
        make_card("b", wrong_count=2, genre="greetings", pronunciation="sa-wat-dee"),
        make_card("c", favorite=True, genre="food"),
        make_card("d", wrong_count=1, favorite=True),
    ]


@pytest.fixture
def store(cards: list[Card]) -> InMemoryCardStore:
    return InMemoryCardStore(cards)


@pytest.fixture
def recovery_store(tmp_path) -> RecoveryStore:
    return RecoveryStore(str(tmp_path / "recovery.db"))
