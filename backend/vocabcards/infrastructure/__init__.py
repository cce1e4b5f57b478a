"""Infrastructure layer - local storage support."""

from .recovery_store import PendingUpdate, RecoveryStore, RecoveryStoreError, SessionRecord
from .retry import RetryableError, TransientError, with_retry

__all__ = [
    "PendingUpdate",
    "RecoveryStore",
    "RecoveryStoreError",
    "SessionRecord",
    "RetryableError",
    "TransientError",
    "with_retry",
]
