"""Domain value objects and shared value types."""

from app.domain.value_objects.credentials import (
    EmailAddress,
    QuoteFingerprint,
    normalize_phone,
)

__all__ = [
    "EmailAddress",
    "QuoteFingerprint",
    "normalize_phone",
]
