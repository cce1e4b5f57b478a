"""Card catalog service: collection browsing and card management."""

import logging
from typing import Any

from vocabcards.domain.constants import FILTER_KEY_ALL, FILTER_KEY_FAVORITES, FILTER_KEY_WEAK
from vocabcards.domain.entities.card import Card
from vocabcards.domain.value_objects.card_filter import CardFilter, FilterKind
from vocabcards.domain.value_objects.collection_stats import CollectionStats, FilterOption
from vocabcards.infrastructure.recovery_store import RecoveryStore, RecoveryStoreError
from vocabcards.ports.card_store import CardStore

logger = logging.getLogger(__name__)

ERASE_CONFIRMATION = "DELETE"

# Fields that queued outcome writes carry
OUTCOME_FIELDS = frozenset({"wrong_count", "last_answered"})


def collect_genres(cards: list[Card]) -> list[str]:
    """Unique genre names across cards, sorted."""
    return sorted({genre for card in cards for genre in card.genres})


def search_cards(cards: list[Card], query: str) -> list[Card]:
    """Case-insensitive substring search over the card's visible text."""
    needle = query.strip().lower()
    if not needle:
        return list(cards)
    return [
        c
        for c in cards
        if needle in c.native_text.lower()
        or needle in c.target_text.lower()
        or needle in c.pronunciation.lower()
    ]


class CardCatalog:
    """Collection-level operations on top of a CardStore.

    Everything the study screens need besides the quiz itself:
    listings, genre and filter counts, favorites, weak-card reset,
    and bulk import/export.

    Writes that set a card's wrong count or answer time retire any
    queued outcome for that card, so replay never undoes them.
    """

    def __init__(self, card_store: CardStore, recovery_store: RecoveryStore | None = None):
        self._card_store = card_store
        self._recovery_store = recovery_store

    async def list_cards(self, card_filter: CardFilter | None = None, query: str = "") -> list[Card]:
        """List cards matching a filter and a search string.

        The weak list is ordered by wrong count, highest first.
        """
        card_filter = card_filter or CardFilter.all()
        cards = search_cards(card_filter.apply(await self._card_store.get_all()), query)
        if card_filter.kind is FilterKind.WEAK:
            cards.sort(key=lambda c: c.wrong_count, reverse=True)
        return cards

    async def get_card(self, card_id: str) -> Card:
        return await self._card_store.get_by_id(card_id)

    async def genres(self) -> list[str]:
        return collect_genres(await self._card_store.get_all())

    async def stats(self) -> CollectionStats:
        """Dashboard counts."""
        cards = await self._card_store.get_all()
        return CollectionStats(
            total_count=len(cards),
            genre_count=len(collect_genres(cards)),
            weak_count=sum(1 for c in cards if c.is_weak),
            favorite_count=sum(1 for c in cards if c.favorite),
        )

    async def filter_options(self) -> list[FilterOption]:
        """Quiz setup choices: all, favorites, weak, then each genre."""
        cards = await self._card_store.get_all()
        options = [
            FilterOption(FILTER_KEY_ALL, "All cards", len(cards)),
            FilterOption(FILTER_KEY_FAVORITES, "Favorites", sum(1 for c in cards if c.favorite)),
            FilterOption(FILTER_KEY_WEAK, "Needs review", sum(1 for c in cards if c.is_weak)),
        ]
        for genre in collect_genres(cards):
            options.append(FilterOption(genre, genre, sum(1 for c in cards if c.in_genre(genre))))
        return options

    async def create_card(self, **fields: Any) -> Card:
        """Create a card; a fresh id is assigned unless one is given."""
        card = Card.from_dict(fields)
        await self._card_store.add(card)
        await self._retire_pending([card.id])
        logger.info(f"Created card {card.id}")
        return card

    async def edit_card(self, card_id: str, fields: dict[str, Any]) -> Card:
        """Apply a partial edit.

        Raises:
            CardNotFoundError: If card_id is unknown
            ValueError: If the edit is invalid
        """
        card = await self._card_store.update_by_id(card_id, fields)
        if OUTCOME_FIELDS & set(fields):
            await self._retire_pending([card_id])
        return card

    async def delete_card(self, card_id: str) -> None:
        await self._card_store.delete(card_id)
        logger.info(f"Deleted card {card_id}")

    async def toggle_favorite(self, card_id: str) -> Card:
        card = await self._card_store.get_by_id(card_id)
        return await self._card_store.update_by_id(card_id, {"favorite": not card.favorite})

    async def reset_weak(self) -> int:
        """Clear the wrong count of every weak card.

        Returns:
            Number of cards reset
        """
        weak = [c for c in await self._card_store.get_all() if c.is_weak]
        for card in weak:
            await self._card_store.update_by_id(card.id, {"wrong_count": 0})
        await self._retire_pending([c.id for c in weak])
        logger.info(f"Reset wrong count on {len(weak)} cards")
        return len(weak)

    async def export_cards(self) -> list[dict]:
        """Dump the collection as JSON-ready dictionaries."""
        return [card.to_dict() for card in await self._card_store.get_all()]

    async def import_cards(self, data: list[dict[str, Any]], replace: bool = False) -> int:
        """Load cards from exported dictionaries.

        Every record is validated before anything is written.

        Args:
            data: Records in to_dict form (legacy camelCase exports accepted)
            replace: Erase the collection first

        Returns:
            Number of cards imported

        Raises:
            ValueError: If data is not a list or a record is invalid
        """
        if not isinstance(data, list):
            raise ValueError("Invalid import format. Expected a list of cards.")
        cards = []
        for index, record in enumerate(data):
            try:
                cards.append(Card.from_dict(record))
            except (TypeError, ValueError, AttributeError) as e:
                raise ValueError(f"Invalid card at index {index}: {e}") from e

        if replace:
            await self._card_store.delete_all()
        imported = await self._card_store.import_cards(cards)
        await self._retire_pending([c.id for c in cards])
        return imported

    async def erase_all(self, confirmation: str) -> None:
        """Delete the whole collection.

        Raises:
            ValueError: If confirmation is not the literal "DELETE"
        """
        if confirmation != ERASE_CONFIRMATION:
            raise ValueError(f"Type '{ERASE_CONFIRMATION}' to confirm erasing all cards")
        await self._card_store.delete_all()
        logger.warning("Erased all cards")

    async def _retire_pending(self, card_ids: list[str]) -> None:
        """Drop queued outcomes for cards whose values were just overwritten."""
        if self._recovery_store is None:
            return
        try:
            for card_id in card_ids:
                await self._recovery_store.discard_for_card(card_id)
        except RecoveryStoreError as e:
            logger.error(f"Could not retire queued outcomes: {e}")
