"""Logging, security events and OpenTelemetry tracing.

telemetry.py (the OTel SDK wiring) is imported by the lifespan only when
tracing is switched on.
"""

from app.shared.telemetry.logging import get_logger, log_security_event, setup_logging
from app.shared.telemetry.tracing import add_span_attributes, traced

__all__ = [
    "add_span_attributes",
    "get_logger",
    "log_security_event",
    "setup_logging",
    "traced",
]
