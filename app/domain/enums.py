"""Domain enumerations for the catalog auth service.

Enums represent fixed sets of domain values (admin roles, permission actions).
"""

from enum import Enum


class AdminRole(str, Enum):
    """Administrative role. Ordered from most to least privileged."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid role values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [role.value for role in cls]


class PermissionAction(str, Enum):
    """Action half of a ``resource:action`` permission. MANAGE implies all others."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


class TwoFactorState(str, Enum):
    """Two-factor lifecycle: absent -> pending_setup -> enabled -> absent."""

    ABSENT = "absent"
    PENDING_SETUP = "pending_setup"
    ENABLED = "enabled"
