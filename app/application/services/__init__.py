"""Application services: credentials and sessions, two-factor, authorization, admins, quotes."""

from app.application.services.admin_service import AdminService
from app.application.services.auth_service import AuthConfig, AuthService
from app.application.services.authorization_service import (
    AuthorizationService,
    can_perform,
    permissions_for_role,
)
from app.application.services.quote_guard import (
    QuoteAdmission,
    QuoteAntiAbuseGate,
    QuoteGuardConfig,
)
from app.application.services.quote_service import (
    QuoteNotificationDispatcher,
    QuoteService,
)
from app.application.services.two_factor_service import TwoFactorConfig, TwoFactorService

__all__ = [
    "AdminService",
    "AuthConfig",
    "AuthService",
    "AuthorizationService",
    "QuoteAdmission",
    "QuoteAntiAbuseGate",
    "QuoteGuardConfig",
    "QuoteNotificationDispatcher",
    "QuoteService",
    "TwoFactorConfig",
    "TwoFactorService",
    "can_perform",
    "permissions_for_role",
]
