"""Retry utilities using tenacity for resilient storage operations."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry configuration (local storage: short waits)
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_WAIT = 0.05  # seconds
DEFAULT_MAX_WAIT = 1.0  # seconds
DEFAULT_JITTER = 0.05  # seconds


class RetryableError(Exception):
    """Base class for errors that should trigger retries."""

    pass


class TransientError(RetryableError):
    """Temporary unavailability (e.g. a locked database file)."""

    pass


def with_retry(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_wait: float = DEFAULT_INITIAL_WAIT,
    max_wait: float = DEFAULT_MAX_WAIT,
    retryable_exceptions: tuple = (RetryableError,),
) -> Callable:
    """Decorator for async functions with exponential backoff retry.

    Wait formula: min(initial * 2^n + random(0, jitter), max)

    Args:
        max_attempts: Maximum number of attempts (default 3)
        initial_wait: Initial wait time in seconds
        max_wait: Maximum wait time in seconds
        retryable_exceptions: Tuple of exception types to retry on

    Returns:
        Decorated async function with retry behavior; the last
        exception is re-raised once attempts run out
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential_jitter(
                    initial=initial_wait,
                    max=max_wait,
                    jitter=DEFAULT_JITTER,
                ),
                retry=retry_if_exception_type(retryable_exceptions),
                reraise=True,
            ):
                with attempt:
                    attempt_num = attempt.retry_state.attempt_number
                    if attempt_num > 1:
                        logger.warning(
                            f"Retry attempt {attempt_num}/{max_attempts} for {func.__name__}"
                        )
                    return await func(*args, **kwargs)

        return wrapper

    return decorator
