"""Logging configuration for the application.

Application modules log through get_logger(__name__). Authentication and
abuse-gate outcomes go through log_security_event() on the dedicated
"security" logger so operators can route them separately.
"""

import json
import logging
import sys
from typing import Any

from app.core.config import get_settings
from app.shared.context import get_current_actor_id, get_request_id

SECURITY_LOGGER_NAME = "security"

# Never emitted, even if a caller passes them by mistake.
_REDACTED_FIELDS = frozenset(
    {"password", "new_password", "current_password", "code", "token", "refresh_token", "secret"}
)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; merges the record's ``security`` extra dict."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "security", None)
        if isinstance(fields, dict):
            payload.update(fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise settings.log_level.
    Output goes to stdout, as plain text or JSON lines (settings.log_json).
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else settings.log_level.upper()
    handler = logging.StreamHandler(sys.stdout)
    if settings.log_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    logging.basicConfig(level=log_level, handlers=[handler], force=True)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


def log_security_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a structured security event.

    Callers pass masked identifiers only (e.g. mask_email); known secret
    field names are dropped regardless.
    """
    data = {k: v for k, v in fields.items() if k not in _REDACTED_FIELDS and v is not None}
    data["event"] = event
    request_id = get_request_id()
    if request_id:
        data["request_id"] = request_id
    actor_id = get_current_actor_id()
    if actor_id:
        data.setdefault("actor_id", actor_id)
    rendered = " ".join(f"{k}={v}" for k, v in sorted(data.items()) if k != "event")
    logging.getLogger(SECURITY_LOGGER_NAME).log(
        level, "%s %s", event, rendered, extra={"security": data}
    )
