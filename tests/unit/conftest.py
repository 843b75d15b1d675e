"""Service-level fixtures: real crypto, in-memory repositories, a frozen clock."""

from dataclasses import dataclass

import pytest

from app.application.services import AuthService, TwoFactorService
from app.infrastructure.security import (
    PasswordHasher,
    SecretEncryptor,
    TokenConfig,
    TokenHasher,
    TokenSigner,
    TotpService,
)
from tests.conftest import Fakes
from tests.fakes import FrozenClock

SIGNING_SECRET = "unit-test-signing-secret-0123456789abcdef"
REFRESH_SECRET = "unit-test-refresh-secret-0123456789abcdef"


@pytest.fixture(scope="session")
def encryptor() -> SecretEncryptor:
    return SecretEncryptor("unit-test-encryption-secret", "unit-test-salt")


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def signer() -> TokenSigner:
    return TokenSigner(TokenConfig(secret_key=SIGNING_SECRET))


@pytest.fixture
def token_hasher() -> TokenHasher:
    return TokenHasher(REFRESH_SECRET)


@pytest.fixture
def totp() -> TotpService:
    return TotpService(issuer="Test Supplier", valid_window=1)


@dataclass
class Services:
    auth: AuthService
    two_factor: TwoFactorService


@pytest.fixture
def services(
    fakes: Fakes,
    clock: FrozenClock,
    signer: TokenSigner,
    token_hasher: TokenHasher,
    totp: TotpService,
    encryptor: SecretEncryptor,
    password_hasher: PasswordHasher,
) -> Services:
    two_factor = TwoFactorService(
        fakes.admins,
        fakes.backup_codes,
        totp,
        encryptor,
        token_hasher,
        fakes.audit,
        clock=clock,
    )
    auth = AuthService(
        fakes.admins,
        fakes.refresh_tokens,
        signer,
        token_hasher,
        password_hasher,
        two_factor,
        fakes.audit,
        clock=clock,
    )
    return Services(auth=auth, two_factor=two_factor)
