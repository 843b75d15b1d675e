"""Core constants: counter-store key prefixes and shared literal values.

Single source of truth for shared-store key structure (DRY). Used by
infrastructure.cache.keys and the quote anti-abuse gate.
"""

# Key prefixes for the shared counter store
COUNTER_PREFIX_QUOTE_DEDUP = "quote:dedup"
COUNTER_PREFIX_QUOTE_DAILY = "quote:daily"

# Delimiter for composite keys
COUNTER_KEY_SEP = ":"

# Rolling window for the per-email daily cap
QUOTE_DAILY_WINDOW_SECONDS = 24 * 60 * 60

# Generic messages: callers never learn which factor or rule failed
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
NOT_AUTHENTICATED_MESSAGE = "Not authenticated"
INVALID_REQUEST_MESSAGE = "Invalid request"
TOO_MANY_REQUESTS_MESSAGE = "Too many requests"
