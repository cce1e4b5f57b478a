"""FastAPI dependency injection module.

Provides singleton instances of services for API routes.
Uses lifespan events for initialization and cleanup.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from vocabcards.composition import (
    create_card_catalog,
    create_card_store,
    create_recovery_store,
    create_session_manager,
)
from vocabcards.domain.services.card_catalog import CardCatalog
from vocabcards.domain.services.session_manager import SessionManager
from vocabcards.infrastructure.recovery_store import RecoveryStore
from vocabcards.ports.card_store import CardStore

logger = logging.getLogger(__name__)


# Singletons stored at module level
_recovery_store: RecoveryStore | None = None
_card_store: CardStore | None = None
_session_manager: SessionManager | None = None
_card_catalog: CardCatalog | None = None


async def init_dependencies() -> None:
    """Initialize all singleton dependencies.

    Called during FastAPI lifespan startup.
    """
    global _recovery_store, _card_store, _session_manager, _card_catalog

    _recovery_store = create_recovery_store()
    stale = await _recovery_store.reset_stale_sessions()
    if stale:
        logger.warning(f"Marked {stale} sessions left open by a previous run as abandoned")

    _card_store = create_card_store()
    _card_catalog = create_card_catalog(_card_store, _recovery_store)
    _session_manager = create_session_manager(_card_store, _recovery_store)

    pending = await _recovery_store.get_pending_count()
    if pending:
        logger.info(f"{pending} queued outcome writes will be replayed at next session start")


async def cleanup_dependencies() -> None:
    """Cleanup dependencies on shutdown.

    Called during FastAPI lifespan shutdown.
    Closes the held session and the card store.
    """
    global _session_manager, _card_store

    if _session_manager is not None:
        await _session_manager.force_end_all_sessions()

    if _card_store is not None:
        await _card_store.close()


def get_recovery_store() -> RecoveryStore:
    """Dependency: Get RecoveryStore instance."""
    if _recovery_store is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _recovery_store


def get_card_store() -> CardStore:
    """Dependency: Get CardStore instance."""
    if _card_store is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _card_store


def get_session_manager() -> SessionManager:
    """Dependency: Get SessionManager instance."""
    if _session_manager is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _session_manager


def get_card_catalog() -> CardCatalog:
    """Dependency: Get CardCatalog instance."""
    if _card_catalog is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return _card_catalog


# Type aliases for dependency injection
RecoveryStoreDep = Annotated[RecoveryStore, Depends(get_recovery_store)]
CardStoreDep = Annotated[CardStore, Depends(get_card_store)]
SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]
CardCatalogDep = Annotated[CardCatalog, Depends(get_card_catalog)]


# =============================================================================
# In-Memory Rate Limiter
# =============================================================================


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    max_requests: int
    window_seconds: int


# Per-endpoint rate limits
RATE_LIMITS: dict[str, RateLimitConfig] = {
    "/api/session/start": RateLimitConfig(max_requests=30, window_seconds=60),
    "/api/session/{session_id}/judge": RateLimitConfig(max_requests=240, window_seconds=60),
    "/api/cards/import": RateLimitConfig(max_requests=10, window_seconds=60),
}


class InMemoryRateLimiter:
    """Simple in-memory rate limiter using sliding window.

    Not suitable for multi-process deployments.
    Uses IP address as client identifier.
    """

    def __init__(self) -> None:
        # requests[endpoint][client_ip] = list of timestamps
        self._requests: dict[str, dict[str, list[datetime]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def _cleanup_old_requests(self, endpoint: str, client_ip: str, window_seconds: int) -> None:
        """Remove requests outside the sliding window."""
        cutoff = datetime.now(UTC).timestamp() - window_seconds
        self._requests[endpoint][client_ip] = [
            ts for ts in self._requests[endpoint][client_ip] if ts.timestamp() > cutoff
        ]

    def is_allowed(self, endpoint: str, client_ip: str) -> bool:
        """Check if request is allowed under rate limit."""
        config = RATE_LIMITS.get(endpoint)
        if config is None:
            return True

        self._cleanup_old_requests(endpoint, client_ip, config.window_seconds)
        return len(self._requests[endpoint][client_ip]) < config.max_requests

    def record_request(self, endpoint: str, client_ip: str) -> None:
        """Record a request for rate limiting."""
        self._requests[endpoint][client_ip].append(datetime.now(UTC))

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()


# Singleton rate limiter
_rate_limiter = InMemoryRateLimiter()


def get_rate_limiter() -> InMemoryRateLimiter:
    """Dependency: Get rate limiter instance."""
    return _rate_limiter


def rate_limit(endpoint: str):
    """Dependency factory: Rate limit check for endpoint.

    Usage:
        @router.post("/start")
        async def start_session(
            _: Annotated[None, Depends(rate_limit("/api/session/start"))],
            ...
        ):

    Raises:
        HTTPException 429 if rate limit exceeded
    """

    async def check_rate_limit(request: Request) -> None:
        client_ip = request.client.host if request.client else "unknown"

        if not _rate_limiter.is_allowed(endpoint, client_ip):
            config = RATE_LIMITS[endpoint]
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "error": {
                        "code": "RATE_LIMIT_EXCEEDED",
                        "message": f"Too many requests. Limit: {config.max_requests}/{config.window_seconds}s",
                    }
                },
            )

        _rate_limiter.record_request(endpoint, client_ip)

    return check_rate_limit
