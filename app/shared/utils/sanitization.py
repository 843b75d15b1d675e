"""Free-text cleanup for quote fields before they are stored or mailed to staff."""

import re
from typing import ClassVar

import nh3


class InputSanitizer:
    """
    Strip markup and control characters from user-supplied text.

    Parameterized queries remain the primary defense; this keeps stored text
    safe to drop into notification bodies and the staff UI.
    """

    ALLOWED_TAGS: ClassVar[set[str]] = set()
    CONTROL_CHARS: ClassVar[re.Pattern[str]] = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

    @classmethod
    def sanitize_html(cls, value: str) -> str:
        """Remove all HTML tags with nh3 (no tags allowed)."""
        if not value:
            return value
        return nh3.clean(value, tags=cls.ALLOWED_TAGS, attributes={})

    @classmethod
    def sanitize_text(cls, value: str) -> str:
        """Strip HTML and control characters, then surrounding whitespace."""
        if not value:
            return value
        return cls.CONTROL_CHARS.sub("", cls.sanitize_html(value)).strip()
