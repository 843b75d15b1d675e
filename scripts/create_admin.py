"""Create an admin account.

Usage:
    uv run python -m scripts.create_admin <email> <name> [role] [password]
Role defaults to admin. If password is omitted, a random one is printed.
All imports use app.*.
"""

import asyncio
import secrets
import sys

from app.application.services import AdminService
from app.core.config import get_settings
from app.domain.exceptions import CatalogException
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories import (
    AdminRepository,
    RefreshTokenRepository,
)
from app.infrastructure.security import PasswordHasher
from app.infrastructure.services import DatabaseAuditSink


async def main() -> None:
    """Create the admin; exit 1 on invalid input or duplicate email."""
    if len(sys.argv) < 3:
        print(
            "Usage: uv run python -m scripts.create_admin <email> <name> [role] [password]",
            file=sys.stderr,
        )
        sys.exit(1)
    email = sys.argv[1]
    name = sys.argv[2]
    role = sys.argv[3] if len(sys.argv) > 3 else "admin"
    password = sys.argv[4] if len(sys.argv) > 4 else None
    generated = password is None
    if generated:
        password = secrets.token_urlsafe(16)

    settings = get_settings()
    factory = get_session_factory()
    async with factory() as session:
        service = AdminService(
            AdminRepository(session),
            RefreshTokenRepository(session),
            PasswordHasher(rounds=settings.bcrypt_rounds),
            DatabaseAuditSink(factory),
        )
        try:
            admin = await service.create_admin(email, password, name, role)
        except CatalogException as e:
            print(f"Error: {e.message}", file=sys.stderr)
            sys.exit(1)
    print(f"Created admin {admin.id} ({admin.email}, role={admin.role})")
    if generated:
        print(f"Password: {password}")


if __name__ == "__main__":
    asyncio.run(main())
