"""
Core constants used across the application. Keep these simple and documented.
"""

# Requested batch size is clamped into [MIN_COUNT, MAX_COUNT]
MIN_COUNT: int = 1
MAX_COUNT: int = 10
DEFAULT_COUNT: int = 5

# History window read for duplicate suppression
DEFAULT_HISTORY_LIMIT: int = 50
MAX_HISTORY_LIMIT: int = 100
# Only the most recent signatures of each kind are matched against
MAX_EXCLUSION_SIGNATURES: int = 100

# Generator is asked for more than it needs so shaping has room to drop items
GENERATOR_MIN_CANDIDATES: int = 12
GENERATOR_MAX_CANDIDATES: int = 20

ANONYMOUS_USER_ID: str = "anonymous"
NO_PREFERENCE_FINGERPRINT: str = "none"

GENERATOR_FAILED_MESSAGE: str = "AI temporarily unavailable, showing curated recommendations"

RECOMMENDATION_CACHE_KEY: str = "picknext:recs:{category}:{fingerprint}"
RECOMMENDATION_CACHE_PATTERN: str = "picknext:recs:*"
HISTORY_KEY: str = "picknext:history:{user_id}:{category}"
PREFERENCE_KEY: str = "picknext:preference:{user_id}:{category}"

# Metadata flag on curated items used to complete a generated batch
SUPPLEMENTED_KEY: str = "supplemented"
