"""Two-factor credential domain entity.

Represents an admin's TOTP enrolment, independent of persistence.
"""

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import TwoFactorState
from app.domain.exceptions import TwoFactorStateException


@dataclass
class TwoFactorCredentialEntity:
    """Domain entity for an admin's second factor (SRP: state rules only).

    Lifecycle: absent -> pending_setup (secret issued, unconfirmed) ->
    enabled (confirmed) -> absent on disable. Only an enabled credential
    with a confirmation timestamp gates login.
    """

    admin_id: str
    encrypted_secret: str | None = None
    enabled: bool = False
    confirmed_at: datetime | None = None

    @property
    def state(self) -> TwoFactorState:
        if self.enabled and self.confirmed_at is not None:
            return TwoFactorState.ENABLED
        if self.encrypted_secret:
            return TwoFactorState.PENDING_SETUP
        return TwoFactorState.ABSENT

    @property
    def gates_login(self) -> bool:
        return self.state == TwoFactorState.ENABLED

    def begin_setup(self, encrypted_secret: str) -> None:
        """Store a fresh secret in pending_setup. Re-initiating replaces an unconfirmed secret.

        Raises:
            TwoFactorStateException: If 2FA is already enabled.
        """
        if self.state == TwoFactorState.ENABLED:
            raise TwoFactorStateException("Two-factor authentication is already enabled")
        self.encrypted_secret = encrypted_secret
        self.enabled = False
        self.confirmed_at = None

    def confirm(self, now: datetime) -> None:
        """Move pending_setup -> enabled. Caller has already verified a code.

        Raises:
            TwoFactorStateException: If setup was not initiated or already confirmed.
        """
        self.require_pending_setup()
        self.enabled = True
        self.confirmed_at = now

    def require_pending_setup(self) -> None:
        """Raise unless a secret was issued and not yet confirmed."""
        if self.state == TwoFactorState.ABSENT:
            raise TwoFactorStateException("Two-factor setup has not been initiated")
        if self.state == TwoFactorState.ENABLED:
            raise TwoFactorStateException("Two-factor authentication is already enabled")

    def require_enabled(self) -> None:
        if self.state != TwoFactorState.ENABLED:
            raise TwoFactorStateException("Two-factor authentication is not enabled")

    def clear(self) -> None:
        """Return to absent (secret and confirmation removed)."""
        self.encrypted_secret = None
        self.enabled = False
        self.confirmed_at = None
