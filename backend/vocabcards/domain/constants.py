"""
Shared Domain Constants.

Central location for the quiz engine's tuning values and the
query keys shared between the session engine and the API.
"""

# =============================================================================
# Session Selection
# =============================================================================
# Sessions are capped for UX: a full collection can hold hundreds of cards.

DEFAULT_SESSION_SIZE = 20

# Selection weight = BASE_CARD_WEIGHT + MISS_WEIGHT * wrong_count.
# A card is never weightless, and every recorded miss adds MISS_WEIGHT.
BASE_CARD_WEIGHT = 1
MISS_WEIGHT = 2


# =============================================================================
# Filter Keys
# =============================================================================
# Keys used by the quiz setup screen; anything else is a genre name.

FILTER_KEY_ALL = "all"
FILTER_KEY_FAVORITES = "_fav"
FILTER_KEY_WEAK = "_weak"


# =============================================================================
# Genre Parsing
# =============================================================================

# ASCII comma, full-width comma and ideographic comma
GENRE_SEPARATORS = (",", "，", "、")


# =============================================================================
# Text-to-Speech Defaults
# =============================================================================

DEFAULT_TTS_LANG = "th-TH"
DEFAULT_TTS_RATE = 1.0
MIN_TTS_RATE = 0.5
MAX_TTS_RATE = 2.0
