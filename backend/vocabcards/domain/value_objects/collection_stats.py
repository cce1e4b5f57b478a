"""Collection statistics value objects."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CollectionStats:
    """Immutable counts shown on the dashboard."""

    total_count: int
    genre_count: int
    weak_count: int
    favorite_count: int

    @property
    def has_cards(self) -> bool:
        """Whether the collection has anything to study."""
        return self.total_count > 0


@dataclass(frozen=True)
class FilterOption:
    """One quiz setup choice with the size of its pool."""

    key: str
    label: str
    count: int

    @property
    def is_empty(self) -> bool:
        return self.count == 0
