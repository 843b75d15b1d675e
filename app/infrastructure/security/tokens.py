"""Opaque refresh tokens and backup-code hashing.

Refresh tokens are random 64-byte values; only an HMAC-SHA256 digest keyed
with the refresh secret is persisted. Backup codes are hashed the same way
after normalization, so a leaked table cannot be brute-forced offline without
the key.
"""

import hashlib
import hmac
import secrets


def generate_refresh_token() -> str:
    """Return a new opaque refresh token (128 hex chars)."""
    return secrets.token_hex(64)


class TokenHasher:
    """Keyed one-way hashing for opaque secrets stored server-side."""

    def __init__(self, secret: str) -> None:
        self._key = secret.encode("utf-8")

    def hash(self, value: str) -> str:
        return hmac.new(self._key, value.encode("utf-8"), hashlib.sha256).hexdigest()

    def hash_backup_code(self, code: str) -> str:
        """Hash a backup code; separators, spaces and case are ignored."""
        normalized = "".join(ch for ch in code.upper() if ch.isalnum())
        return self.hash(f"backup:{normalized}")
