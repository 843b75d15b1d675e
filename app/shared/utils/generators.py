"""ID and value generators (CUID, quote references, backup codes)."""

import secrets
import string
from datetime import datetime

from cuid2 import cuid_wrapper

from app.shared.utils.datetime import utc_now

cuid_generator = cuid_wrapper()

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_quote_reference(now: datetime | None = None) -> str:
    """Return a human-readable quote reference, e.g. QR-20260115-7K2M9X."""
    day = (now or utc_now()).strftime("%Y%m%d")
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(6))
    return f"QR-{day}-{suffix}"


def generate_backup_code() -> str:
    """Return a backup code in XXXX-XXXX-XXXX form (48 random bits, upper hex)."""
    raw = secrets.token_hex(6).upper()
    return f"{raw[0:4]}-{raw[4:8]}-{raw[8:12]}"
