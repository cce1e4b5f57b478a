"""Domain services - selection, outcome feedback and orchestration.

Only the pure algorithms are re-exported here; the session entity
depends on them. Import SessionManager and CardCatalog from their
modules.
"""

from .outcome import apply_outcome
from .selector import EmptyPoolError, RandomSource, card_weight, select_session

__all__ = [
    "EmptyPoolError",
    "RandomSource",
    "apply_outcome",
    "card_weight",
    "select_session",
]
