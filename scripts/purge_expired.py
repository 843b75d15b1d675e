"""Delete expired refresh sessions and audit entries past retention.

Usage:
    uv run python -m scripts.purge_expired [retention_days]
retention_days defaults to AUDIT_LOG_RETENTION_DAYS. Intended for a daily cron.
"""

import asyncio
import sys
from datetime import timedelta

from app.core.config import get_settings
from app.infrastructure.persistence.database import get_session_factory
from app.infrastructure.persistence.repositories import (
    AuditLogRepository,
    RefreshTokenRepository,
)
from app.shared.utils.datetime import utc_now


async def main() -> None:
    """Purge both tables and print the counts."""
    settings = get_settings()
    retention_days = int(sys.argv[1]) if len(sys.argv) > 1 else settings.audit_log_retention_days
    if retention_days < 1:
        print("retention_days must be >= 1", file=sys.stderr)
        sys.exit(1)

    now = utc_now()
    async with get_session_factory()() as session:
        sessions = await RefreshTokenRepository(session).delete_expired(now)
        entries = await AuditLogRepository(session).purge_older_than(
            now - timedelta(days=retention_days)
        )
    print(f"Deleted {sessions} expired refresh session(s)")
    print(f"Purged {entries} audit entr{'y' if entries == 1 else 'ies'} older than {retention_days} days")


if __name__ == "__main__":
    asyncio.run(main())
