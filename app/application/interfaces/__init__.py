"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAdminRepository,
    IAuditLogRepository,
    IBackupCodeRepository,
    IQuoteRepository,
    IRefreshTokenRepository,
)
from app.application.interfaces.services import (
    IAuditSink,
    ICaptchaVerifier,
    ICounterStore,
    IQuoteNotifier,
)

__all__ = [
    "IAdminRepository",
    "IAuditLogRepository",
    "IAuditSink",
    "IBackupCodeRepository",
    "ICaptchaVerifier",
    "ICounterStore",
    "IQuoteNotifier",
    "IQuoteRepository",
    "IRefreshTokenRepository",
]
