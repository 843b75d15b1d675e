"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.audit_sink import DatabaseAuditSink
from app.infrastructure.services.captcha_verifier import HttpCaptchaVerifier
from app.infrastructure.services.quote_notifier import (
    LogOnlyQuoteNotifier,
    WebhookQuoteNotifier,
)

__all__ = [
    "DatabaseAuditSink",
    "HttpCaptchaVerifier",
    "LogOnlyQuoteNotifier",
    "WebhookQuoteNotifier",
]
