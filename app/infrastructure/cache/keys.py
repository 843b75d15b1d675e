"""Counter-store key builders. Single place for key format (DRY).

Key components are hex digests of normalized contact data, so raw emails and
phone numbers never reach the shared store.
"""

from app.core.constants import (
    COUNTER_KEY_SEP,
    COUNTER_PREFIX_QUOTE_DAILY,
    COUNTER_PREFIX_QUOTE_DEDUP,
)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the key separator.

    Args:
        value: String component used in a key.
        name: Name of the component (for error message).

    Raises:
        ValueError: If value is empty or contains COUNTER_KEY_SEP.
    """
    if not value:
        raise ValueError(f"Counter key component {name!r} must not be empty")
    if COUNTER_KEY_SEP in value:
        raise ValueError(
            f"Counter key component {name!r} must not contain separator {COUNTER_KEY_SEP!r}"
        )


def quote_dedup_key(fingerprint_digest: str) -> str:
    """Key for the duplicate-submission window of one (email, phone) fingerprint."""
    _validate_key_component(fingerprint_digest, "fingerprint_digest")
    return f"{COUNTER_PREFIX_QUOTE_DEDUP}{COUNTER_KEY_SEP}{fingerprint_digest}"


def quote_daily_key(email_digest: str) -> str:
    """Key for the rolling 24-hour submission window of one email."""
    _validate_key_component(email_digest, "email_digest")
    return f"{COUNTER_PREFIX_QUOTE_DAILY}{COUNTER_KEY_SEP}{email_digest}"
