"""API layer - FastAPI routes and dependencies."""

from .dependencies import (
    CardCatalogDep,
    CardStoreDep,
    InMemoryRateLimiter,
    RecoveryStoreDep,
    SessionManagerDep,
    cleanup_dependencies,
    get_card_catalog,
    get_card_store,
    get_rate_limiter,
    get_recovery_store,
    get_session_manager,
    init_dependencies,
    rate_limit,
)
from .routes import cards_router, collection_router, session_router

__all__ = [
    # Routes
    "session_router",
    "cards_router",
    "collection_router",
    # Dependencies
    "init_dependencies",
    "cleanup_dependencies",
    "get_recovery_store",
    "get_card_store",
    "get_session_manager",
    "get_card_catalog",
    "get_rate_limiter",
    "rate_limit",
    # Type aliases
    "RecoveryStoreDep",
    "CardStoreDep",
    "SessionManagerDep",
    "CardCatalogDep",
    "InMemoryRateLimiter",
]
