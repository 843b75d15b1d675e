"""Error types raised by services and mapped to HTTP in app.core.exception_handlers.

Each carries a stable error_code. Messages are safe to show the caller;
anything sensitive (which rule fired, which factor was wrong) stays in the
logs.
"""

from typing import Any

from app.core.constants import (
    INVALID_CREDENTIALS_MESSAGE,
    INVALID_REQUEST_MESSAGE,
    TOO_MANY_REQUESTS_MESSAGE,
)


class CatalogException(Exception):
    """Base for every application error: message, error_code and optional details."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(CatalogException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(CatalogException):
    """Raised when authentication fails (bad credentials, bad code, bad token).

    The message is deliberately generic; the specific reason goes to the
    security log only.
    """

    def __init__(self, message: str = INVALID_CREDENTIALS_MESSAGE) -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(CatalogException):
    """Raised when the principal lacks the role or permission for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'quote', 'admin').
            action: Optional action that was attempted (e.g. 'read', 'manage').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class TwoFactorStateException(CatalogException):
    """Raised when a 2FA operation is not valid in the account's current 2FA state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "TWO_FACTOR_STATE_ERROR")


class QuoteRejectedException(CatalogException):
    """Raised when the anti-abuse gate rejects a quote submission.

    Only the generic message reaches the caller; ``rule`` is kept for the
    security log and is never serialized.
    """

    def __init__(self, rule: str) -> None:
        self.rule = rule
        super().__init__(INVALID_REQUEST_MESSAGE, "INVALID_REQUEST")


class QuoteLimitExceededException(QuoteRejectedException):
    """Raised when a submission hits the duplicate window or the daily cap."""

    def __init__(self, rule: str) -> None:
        super().__init__(rule)
        self.message = TOO_MANY_REQUESTS_MESSAGE
        self.error_code = "RATE_LIMITED"
        self.args = (self.message,)


class StoreUnavailableException(CatalogException):
    """Raised when a security-relevant store cannot be consulted (fail closed)."""

    def __init__(self, store: str) -> None:
        super().__init__(
            "Service temporarily unavailable",
            "SERVICE_UNAVAILABLE",
            {"store": store},
        )


class AdminAlreadyExistsException(CatalogException):
    """Raised when provisioning an admin whose email is already registered."""

    def __init__(self) -> None:
        super().__init__("Email is already registered", "ADMIN_ALREADY_EXISTS", {})


class ResourceNotFoundException(CatalogException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'admin', 'quote').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
