"""API routes module."""

from .cards import router as cards_router
from .collection import router as collection_router
from .session import router as session_router

__all__ = ["session_router", "cards_router", "collection_router"]
