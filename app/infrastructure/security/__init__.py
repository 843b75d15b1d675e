"""Security: JWT, password hashing, TOTP, secret encryption, token hashing."""

from app.infrastructure.security.encryption import SecretEncryptor
from app.infrastructure.security.jwt import (
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_PENDING_2FA,
    TokenConfig,
    TokenSigner,
)
from app.infrastructure.security.password import PasswordHasher
from app.infrastructure.security.tokens import TokenHasher, generate_refresh_token
from app.infrastructure.security.totp import TotpService

__all__ = [
    "PasswordHasher",
    "SecretEncryptor",
    "TOKEN_TYPE_ACCESS",
    "TOKEN_TYPE_PENDING_2FA",
    "TokenConfig",
    "TokenHasher",
    "TokenSigner",
    "TotpService",
    "generate_refresh_token",
]
