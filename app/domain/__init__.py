"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import TwoFactorCredentialEntity
from app.domain.enums import AdminRole, PermissionAction, TwoFactorState
from app.domain.exceptions import (
    AdminAlreadyExistsException,
    AuthenticationException,
    AuthorizationException,
    CatalogException,
    QuoteLimitExceededException,
    QuoteRejectedException,
    ResourceNotFoundException,
    StoreUnavailableException,
    TwoFactorStateException,
    ValidationException,
)
from app.domain.value_objects import EmailAddress, QuoteFingerprint

__all__ = [
    # Entities
    "TwoFactorCredentialEntity",
    # Enums
    "AdminRole",
    "PermissionAction",
    "TwoFactorState",
    # Exceptions
    "AdminAlreadyExistsException",
    "AuthenticationException",
    "AuthorizationException",
    "CatalogException",
    "QuoteLimitExceededException",
    "QuoteRejectedException",
    "ResourceNotFoundException",
    "StoreUnavailableException",
    "TwoFactorStateException",
    "ValidationException",
    # Value objects
    "EmailAddress",
    "QuoteFingerprint",
]
