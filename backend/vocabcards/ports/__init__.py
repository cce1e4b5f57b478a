# Ports layer - Abstract interfaces (Protocols)

from .card_store import CardNotFoundError, CardStore, CardStoreError

__all__ = [
    "CardStore",
    "CardStoreError",
    "CardNotFoundError",
]
