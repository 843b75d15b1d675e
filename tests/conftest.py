"""Pytest configuration and fixtures for the catalog auth service.

Environment is fixed before app.* is imported: rate limiting off (slowapi
state would leak between tests) and the in-memory counter store. HTTP tests
run against app.main:app with repository, audit and hasher dependencies
overridden by the in-memory fakes in tests.fakes; no database is needed.
Tests that need Postgres are marked requires_db.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COUNTER_BACKEND"] = "memory"

from dataclasses import dataclass  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from app.api.v1.dependencies import (  # noqa: E402
    get_admin_repo,
    get_audit_log_repo,
    get_audit_sink,
    get_backup_code_repo,
    get_password_hasher,
    get_quote_repo,
    get_refresh_token_repo,
)
from app.application.services import QuoteNotificationDispatcher  # noqa: E402
from app.domain.exceptions import StoreUnavailableException  # noqa: E402
from app.infrastructure.cache import InMemoryCounterStore  # noqa: E402
from app.infrastructure.persistence import database  # noqa: E402
from app.infrastructure.security import PasswordHasher  # noqa: E402
from app.main import app  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeAdminRepository,
    FakeAuditSink,
    FakeBackupCodeRepository,
    FakeNotifier,
    FakeQuoteRepository,
    FakeRefreshTokenRepository,
)

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="session")
def password_hasher() -> PasswordHasher:
    """bcrypt at the minimum work factor; hashing cost is not under test."""
    return PasswordHasher(rounds=4)


@pytest.fixture(scope="session")
def password_hash(password_hasher: PasswordHasher) -> str:
    return password_hasher.hash(TEST_PASSWORD)


@dataclass
class Fakes:
    admins: FakeAdminRepository
    backup_codes: FakeBackupCodeRepository
    refresh_tokens: FakeRefreshTokenRepository
    audit: FakeAuditSink
    quotes: FakeQuoteRepository
    notifier: FakeNotifier
    counter_store: InMemoryCounterStore


@pytest.fixture
def fakes() -> Fakes:
    return Fakes(
        admins=FakeAdminRepository(),
        backup_codes=FakeBackupCodeRepository(),
        refresh_tokens=FakeRefreshTokenRepository(),
        audit=FakeAuditSink(),
        quotes=FakeQuoteRepository(),
        notifier=FakeNotifier(),
        counter_store=InMemoryCounterStore(),
    )


@pytest.fixture
async def client(fakes: Fakes, password_hasher: PasswordHasher) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) wired to in-memory fakes.

    ASGITransport does not run the lifespan, so app.state is populated here.
    """
    app.dependency_overrides.update(
        {
            get_admin_repo: lambda: fakes.admins,
            get_backup_code_repo: lambda: fakes.backup_codes,
            get_refresh_token_repo: lambda: fakes.refresh_tokens,
            get_audit_sink: lambda: fakes.audit,
            get_audit_log_repo: lambda: fakes.audit,
            get_quote_repo: lambda: fakes.quotes,
            get_password_hasher: lambda: password_hasher,
        }
    )
    app.state.counter_store = fakes.counter_store
    app.state.quote_dispatcher = QuoteNotificationDispatcher(fakes.notifier, fakes.audit)
    app.state.captcha_verifier = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await app.state.quote_dispatcher.drain()
    app.dependency_overrides.clear()
    app.state.counter_store = None
    app.state.quote_dispatcher = None
    app.state.captcha_verifier = None


async def login_headers(client: AsyncClient, email: str, password: str = TEST_PASSWORD) -> dict[str, str]:
    """Log in (no 2FA) and return the Authorization header."""
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def cookie_value(response, name: str = "refresh_token") -> str | None:
    """Value of a Set-Cookie on response ('' when the cookie is being cleared)."""
    for header in response.headers.get_list("set-cookie"):
        key, _, rest = header.partition("=")
        if key.strip() == name:
            return rest.split(";", 1)[0].strip('"')
    return None


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository tests. Rolls back after test.

    Requires DATABASE_URL pointing at a migrated Postgres (alembic upgrade head).
    Run without DB via: pytest -m 'not requires_db'.
    """
    try:
        factory = database.get_session_factory()
    except StoreUnavailableException:
        pytest.skip("Postgres not configured: set DATABASE_URL, then run: alembic upgrade head")
    async with factory() as session:
        try:
            await session.connection()
        except (OSError, SQLAlchemyError):
            pytest.skip("Postgres not reachable at DATABASE_URL")
        yield session
        await session.rollback()
