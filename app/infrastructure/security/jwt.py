"""JWT creation and verification for access and pending-2FA tokens.

The signing algorithm is fixed by configuration; verification only ever
accepts that algorithm, whatever the token header claims.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_PENDING_2FA = "pending_2fa"


@dataclass(frozen=True)
class TokenConfig:
    """Signing configuration, injected so tests can use isolated secrets."""

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    pending_2fa_token_expire_minutes: int = 5


class TokenSigner:
    """Sign and verify short-lived JWTs (access and pending second factor)."""

    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    def _encode(self, claims: dict[str, Any], expires_delta: timedelta) -> str:
        now = datetime.now(UTC)
        to_encode = claims.copy()
        to_encode["iat"] = now
        to_encode["exp"] = now + expires_delta
        encoded = jwt.encode(
            to_encode,
            self._config.secret_key,
            algorithm=self._config.algorithm,
        )
        return cast(str, encoded)

    def create_access_token(
        self,
        admin_id: str,
        email: str,
        role: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create an access token carrying sub, email and role.

        Args:
            admin_id: Account id (sub claim).
            email: Normalized email.
            role: Role value at issuance time.
            expires_delta: Optional TTL; else access_token_expire_minutes.

        Returns:
            Encoded JWT string.
        """
        ttl = expires_delta or timedelta(minutes=self._config.access_token_expire_minutes)
        return self._encode(
            {"sub": admin_id, "email": email, "role": role, "type": TOKEN_TYPE_ACCESS},
            ttl,
        )

    def create_pending_2fa_token(self, admin_id: str) -> str:
        """Create a token that carries only the account id and the 'awaiting second factor' marker."""
        return self._encode(
            {"sub": admin_id, "type": TOKEN_TYPE_PENDING_2FA},
            timedelta(minutes=self._config.pending_2fa_token_expire_minutes),
        )

    def verify(self, token: str, expected_type: str) -> dict[str, Any]:
        """Verify and decode a JWT of the given type. Returns the payload.

        Enforces the configured algorithm, exp, sub, and the type claim.

        Args:
            token: JWT string.
            expected_type: TOKEN_TYPE_ACCESS or TOKEN_TYPE_PENDING_2FA.

        Returns:
            Decoded payload dict.

        Raises:
            ValueError: If token is invalid, expired, of the wrong type, or
                missing required claims.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise ValueError(f"Invalid token: {e!s}") from e
        if header.get("alg") != self._config.algorithm:
            raise ValueError("Invalid token: unexpected algorithm")
        try:
            payload = jwt.decode(
                token,
                self._config.secret_key,
                algorithms=[self._config.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as e:
            raise ValueError(f"Invalid token: {e!s}") from e
        if not payload.get("sub"):
            raise ValueError("Token missing required claim: sub")
        if payload.get("type") != expected_type:
            raise ValueError("Invalid token: wrong token type")
        return payload
