"""Weighted session selection.

Draws the study queue for a quiz session: weighted sampling without
replacement, biased toward cards with a history of misses.
"""

import random
from collections.abc import Sequence
from typing import Protocol

from vocabcards.domain.constants import BASE_CARD_WEIGHT, DEFAULT_SESSION_SIZE, MISS_WEIGHT
from vocabcards.domain.entities.card import Card


class EmptyPoolError(ValueError):
    """Raised when a session is requested against zero eligible cards."""

    pass


class RandomSource(Protocol):
    """Anything with random.Random's random() method."""

    def random(self) -> float: ...


def card_weight(card: Card) -> int:
    """Selection weight for a card (never zero)."""
    return BASE_CARD_WEIGHT + MISS_WEIGHT * card.wrong_count


def select_session(
    pool: Sequence[Card],
    target_size: int = DEFAULT_SESSION_SIZE,
    rng: RandomSource | None = None,
) -> list[Card]:
    """Draw an ordered study queue from pool.

    Each round draws r uniformly from [0, total weight) and walks the
    remaining cards in order, taking the first whose weight exceeds what
    is left of r. The chosen card leaves the pool, so no card repeats.

    Args:
        pool: Candidate cards (not mutated)
        target_size: Requested queue length, clamped to the pool size
        rng: Random source; defaults to the random module

    Returns:
        min(target_size, len(pool)) cards in draw order

    Raises:
        EmptyPoolError: If pool is empty
        ValueError: If target_size is less than 1
    """
    if not pool:
        raise EmptyPoolError("No cards available for this selection")
    if target_size < 1:
        raise ValueError(f"target_size must be at least 1, got {target_size}")

    source = rng if rng is not None else random
    seen: set[str] = set()
    remaining: list[Card] = []
    for card in pool:
        if card.id not in seen:
            seen.add(card.id)
            remaining.append(card)

    size = min(target_size, len(remaining))
    selected: list[Card] = []

    while len(selected) < size and remaining:
        total_weight = sum(card_weight(c) for c in remaining)
        r = source.random() * total_weight
        # Float error can leave r at the very top of the range; fall back to the last card
        chosen = len(remaining) - 1
        for i, candidate in enumerate(remaining):
            w = card_weight(candidate)
            if r < w:
                chosen = i
                break
            r -= w
        selected.append(remaining.pop(chosen))

    return selected
