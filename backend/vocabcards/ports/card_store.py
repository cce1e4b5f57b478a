"""Port interface for the card store (local persistence)."""

from typing import Any, Protocol, runtime_checkable

from vocabcards.domain.entities.card import Card


class CardStoreError(Exception):
    """Base exception for card store failures."""

    pass


class CardNotFoundError(CardStoreError):
    """Raised when a card id is unknown to the store."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card {card_id} not found")


@runtime_checkable
class CardStore(Protocol):
    """Port for card collection operations.

    The quiz engine only reads the collection and writes partial updates;
    creation and deletion are used by the card management API.
    """

    async def get_all(self) -> list[Card]:
        """Get every card in the collection.

        Returns:
            All cards, in insertion order
        """
        ...

    async def get_by_id(self, card_id: str) -> Card:
        """Get one card.

        Raises:
            CardNotFoundError: If card_id is unknown
        """
        ...

    async def update_by_id(self, card_id: str, fields: dict[str, Any]) -> Card:
        """Merge fields into a stored card.

        Args:
            card_id: Card to update
            fields: Partial card fields (see UPDATABLE_FIELDS)

        Returns:
            The updated card

        Raises:
            CardNotFoundError: If card_id is unknown
            ValueError: If fields contains unknown names or invalid values
        """
        ...

    async def add(self, card: Card) -> Card:
        """Insert or replace a card.

        Returns:
            The stored card
        """
        ...

    async def delete(self, card_id: str) -> None:
        """Delete one card (no-op if it does not exist)."""
        ...

    async def delete_all(self) -> None:
        """Erase the whole collection."""
        ...

    async def import_cards(self, cards: list[Card]) -> int:
        """Upsert many cards.

        Returns:
            Number of cards written
        """
        ...

    async def close(self) -> None:
        """Release resources."""
        ...
