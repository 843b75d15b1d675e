"""Value objects for identities: normalized email and quote fingerprint.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import hashlib
import re
from dataclasses import dataclass

from app.shared.utils.masking import mask_email

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_STRIP_RE = re.compile(r"[^\d+]")


@dataclass(frozen=True)
class EmailAddress:
    """Case-normalized email (trimmed, lower-cased). Lookups always use this form."""

    value: str

    def __post_init__(self) -> None:
        normalized = (self.value or "").strip().lower()
        if not normalized or not _EMAIL_RE.match(normalized):
            raise ValueError("Invalid email address")
        object.__setattr__(self, "value", normalized)

    def masked(self) -> str:
        """Return a log-safe form (e.g. 'j***@example.com')."""
        return mask_email(self.value)

    def __str__(self) -> str:
        return self.value


def normalize_phone(phone: str | None) -> str:
    """Digits and a leading '+' only, so '555-1111' and '555 1111' collide."""
    if not phone:
        return ""
    return _PHONE_STRIP_RE.sub("", phone.strip())


@dataclass(frozen=True)
class QuoteFingerprint:
    """Derived dedup key for a quote submitter: (normalized email, normalized phone).

    The digest is used as the store key so raw contact data never lands in
    the shared counter store.
    """

    email: EmailAddress
    phone: str = ""

    @classmethod
    def from_contact(cls, email: str, phone: str | None) -> "QuoteFingerprint":
        return cls(email=EmailAddress(email), phone=normalize_phone(phone))

    @property
    def digest(self) -> str:
        raw = f"{self.email.value}|{self.phone}".encode()
        return hashlib.sha256(raw).hexdigest()

    @property
    def email_digest(self) -> str:
        return hashlib.sha256(self.email.value.encode()).hexdigest()
