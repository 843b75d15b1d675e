"""Encryption at rest for TOTP shared secrets (Fernet)."""

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

DECRYPTION_ERROR_MSG = "Failed to decrypt secret - invalid or corrupted data"


class SecretEncryptor:
    """Encrypt/decrypt short secrets using Fernet (key derived from an app secret)."""

    def __init__(self, secret: str, salt: str) -> None:
        self._fernet = Fernet(self._derive_key(secret, salt))

    @staticmethod
    def _derive_key(secret: str, salt: str) -> bytes:
        """Derive 32-byte key from secret + salt via PBKDF2-HMAC-SHA256."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt.encode(),
            iterations=100_000,
        )
        return base64.urlsafe_b64encode(kdf.derive(secret.encode()))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt to a string safe for storage."""
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, encrypted_str: str) -> str:
        """Decrypt stored string.

        Raises:
            ValueError: If the ciphertext is invalid or was made with another key.
        """
        try:
            return self._fernet.decrypt(encrypted_str.encode()).decode()
        except InvalidToken as e:
            raise ValueError(DECRYPTION_ERROR_MSG) from e
