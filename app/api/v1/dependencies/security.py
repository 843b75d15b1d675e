"""Security primitives built once from settings (composition root).

Each provider is cached for the process; tests override them through
app.dependency_overrides (e.g. a low-cost PasswordHasher).
"""

from __future__ import annotations

from functools import lru_cache

from app.core.config import get_settings
from app.infrastructure.security import (
    PasswordHasher,
    SecretEncryptor,
    TokenConfig,
    TokenHasher,
    TokenSigner,
    TotpService,
)


@lru_cache
def get_token_signer() -> TokenSigner:
    settings = get_settings()
    return TokenSigner(
        TokenConfig(
            secret_key=settings.jwt_secret_key.get_secret_value(),
            algorithm=settings.algorithm,
            access_token_expire_minutes=settings.access_token_expire_minutes,
            pending_2fa_token_expire_minutes=settings.pending_2fa_token_expire_minutes,
        )
    )


@lru_cache
def get_token_hasher() -> TokenHasher:
    """HMAC key for refresh-token and backup-code hashes."""
    return TokenHasher(get_settings().refresh_token_secret.get_secret_value())


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


@lru_cache
def get_secret_encryptor() -> SecretEncryptor:
    """Fernet encryptor for TOTP secrets at rest."""
    settings = get_settings()
    return SecretEncryptor(
        settings.encryption_secret.get_secret_value(),
        settings.encryption_salt.get_secret_value(),
    )


@lru_cache
def get_totp_service() -> TotpService:
    settings = get_settings()
    return TotpService(issuer=settings.company_name, valid_window=settings.totp_valid_window)
