"""Password hashing (bcrypt with SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; pre-hashing with SHA-256 yields a fixed-length
input so long passwords are not silently truncated.
"""

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    """SHA-256 pre-hash to avoid bcrypt's 72-byte truncation."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, password: str) -> str:
        """Return bcrypt hash of password (SHA-256 pre-hashed before bcrypt)."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Return True if plain_password matches hashed_password."""
        try:
            return bool(
                bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
            )
        except (ValueError, TypeError):
            return False

    @property
    def dummy_hash(self) -> str:
        """A valid hash to verify against when the account does not exist (constant-time login)."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("__no_such_account__")
        return self._dummy_hash
