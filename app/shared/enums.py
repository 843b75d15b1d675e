"""Shared enumerations for the catalog auth service.

Cross-cutting enums used by application and infrastructure (audit actions,
security log events, actor type). Domain-specific enums (e.g. AdminRole)
live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Actor type for audit tracking (who performed the action)."""

    ADMIN = "admin"
    SYSTEM = "system"
    ANONYMOUS = "anonymous"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit log action names (resource.verb)."""

    LOGIN = "auth.login"
    LOGIN_2FA = "auth.login_2fa"
    REFRESH = "auth.refresh"
    REFRESH_REUSE = "auth.refresh_reuse"
    LOGOUT = "auth.logout"
    LOGOUT_ALL = "auth.logout_all"
    PASSWORD_CHANGE = "auth.password_change"
    TWO_FACTOR_SETUP = "two_factor.setup"
    TWO_FACTOR_ENABLE = "two_factor.enable"
    TWO_FACTOR_DISABLE = "two_factor.disable"
    BACKUP_CODES_REGENERATE = "two_factor.backup_codes_regenerate"
    ACCESS_DENIED = "authorization.denied"
    ADMIN_ROLE_CHANGE = "admin.role_change"
    QUOTE_CREATE = "quote.create"
    QUOTE_NOTIFICATION = "quote.notification"


class SecurityEvent(_ValuesMixin, str, Enum):
    """Security log event names (operator-facing, carry the specific reason)."""

    LOGIN_FAILED = "login_failed"
    LOGIN_2FA_REQUIRED = "login_2fa_required"
    LOGIN_SUCCESS = "login_success"
    TWO_FACTOR_SUCCESS = "two_factor_success"
    TWO_FACTOR_FAILED = "two_factor_failed"
    TOKEN_REFRESHED = "token_refreshed"
    TOKEN_REFRESH_FAILED = "token_refresh_failed"
    REFRESH_TOKEN_REUSE_DETECTED = "refresh_token_reuse_detected"
    LOGOUT = "logout"
    AUTHORIZATION_DENIED = "authorization_denied"
    QUOTE_REJECTED = "quote_rejected"
    QUOTE_NOTIFICATION_FAILED = "quote_notification_failed"


class QuoteRejectionRule(_ValuesMixin, str, Enum):
    """Which anti-abuse rule fired. Logged, never returned to the caller."""

    HONEYPOT = "honeypot"
    MISSING_TIMESTAMP = "missing_timestamp"
    TOO_FAST = "too_fast"
    STALE = "stale"
    UNKNOWN_FIELDS = "unknown_fields"
    CAPTCHA_MISSING = "captcha_missing"
    CAPTCHA_FAILED = "captcha_failed"
    DUPLICATE = "duplicate"
    DAILY_CAP = "daily_cap"


class QuoteStatus(_ValuesMixin, str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"
