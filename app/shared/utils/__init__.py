"""Shared utilities: datetime, generators, masking, sanitization."""

from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import (
    generate_backup_code,
    generate_cuid,
    generate_quote_reference,
)
from app.shared.utils.masking import mask_email, mask_ip
from app.shared.utils.sanitization import InputSanitizer

__all__ = [
    "generate_backup_code",
    "generate_cuid",
    "generate_quote_reference",
    "utc_now",
    "ensure_utc",
    "mask_email",
    "mask_ip",
    "InputSanitizer",
]
