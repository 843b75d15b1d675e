"""Time-based one-time passwords (RFC 6238) via pyotp.

30-second step, 6 digits, one step of clock skew tolerated either side.
Verification returns the matched time step so callers can refuse a code
whose step was already used.
"""

import base64
from datetime import UTC, datetime, timedelta
from io import BytesIO

import pyotp
import qrcode
from pyotp.utils import strings_equal

TOTP_DIGITS = 6
TOTP_INTERVAL_SECONDS = 30
SECRET_LENGTH = 32


class TotpService:
    """Generate secrets, provisioning URIs and QR codes; verify codes."""

    def __init__(self, issuer: str, valid_window: int = 1) -> None:
        self.issuer = issuer
        self.valid_window = valid_window

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(
            secret,
            digits=TOTP_DIGITS,
            interval=TOTP_INTERVAL_SECONDS,
            issuer=self.issuer,
        )

    def generate_secret(self) -> str:
        """Return a fresh base32 secret (160 bits)."""
        return pyotp.random_base32(length=SECRET_LENGTH)

    def provisioning_uri(self, secret: str, account_email: str) -> str:
        """Return the otpauth:// URI encoding issuer, account label and secret."""
        return self._totp(secret).provisioning_uri(
            name=account_email, issuer_name=self.issuer
        )

    def qr_code_data_uri(self, provisioning_uri: str) -> str:
        """Render the provisioning URI as a PNG data URI for authenticator apps."""
        qr = qrcode.QRCode(box_size=10, border=2)
        qr.add_data(provisioning_uri)
        qr.make(fit=True)
        image = qr.make_image(fill_color="black", back_color="white")
        bio = BytesIO()
        image.save(bio, format="PNG")
        encoded = base64.b64encode(bio.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def now_code(self, secret: str, for_time: datetime | None = None) -> str:
        """Current code for secret (used by scripts and tests)."""
        return self._totp(secret).at(for_time or datetime.now(UTC))

    def match_step(
        self, secret: str, code: str, for_time: datetime | None = None
    ) -> int | None:
        """Return the time step the code belongs to, or None if it matches no step in the window.

        Checks the current step and valid_window steps before and after it.
        """
        code = (code or "").strip().replace(" ", "")
        if len(code) != TOTP_DIGITS or not code.isdigit():
            return None
        now = for_time or datetime.now(UTC)
        totp = self._totp(secret)
        for offset in range(-self.valid_window, self.valid_window + 1):
            candidate = now + timedelta(seconds=offset * TOTP_INTERVAL_SECONDS)
            if strings_equal(code, totp.at(candidate)):
                return totp.timecode(candidate)
        return None
