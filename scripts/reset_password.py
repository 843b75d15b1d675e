"""Reset an admin's password and revoke all of their sessions.

Usage:
    uv run python -m scripts.reset_password <email> <new_password>
All imports use app.*.
"""

import asyncio
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
    """Reset password for the admin with this email."""
    if len(sys.argv) < 3:
        print(
            "Usage: uv run python -m scripts.reset_password <email> <new_password>",
            file=sys.stderr,
        )
        sys.exit(1)
    email = sys.argv[1]
    new_password = sys.argv[2]

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
            admin = await service.reset_password(email, new_password)
        except CatalogException as e:
            print(f"Error: {e.message}", file=sys.stderr)
            sys.exit(1)
    print(f"Password reset for admin {admin.id} ({admin.email}); all sessions revoked")


if __name__ == "__main__":
    asyncio.run(main())
