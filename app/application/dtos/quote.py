"""DTOs for quote intake."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class QuoteSubmission:
    """Validated, whitelisted quote fields plus the raw anti-abuse signals."""

    name: str
    email: str
    phone: str
    company: str | None = None
    whatsapp: str | None = None
    product_name: str | None = None
    quantity: str | None = None
    project_details: str | None = None
    honeypot: Any = None
    form_started_at_ms: Any = None
    captcha_token: Any = None


@dataclass(frozen=True)
class QuoteCreate:
    """Fields to persist (no anti-abuse signals)."""

    reference: str
    name: str
    email: str
    phone: str
    company: str | None
    whatsapp: str | None
    product_name: str | None
    quantity: str | None
    project_details: str | None
    ip_address: str | None
    user_agent: str | None


@dataclass(frozen=True)
class QuoteResult:
    id: str
    reference: str
    name: str
    email: str
    phone: str
    company: str | None
    whatsapp: str | None
    product_name: str | None
    quantity: str | None
    project_details: str | None
    status: str
    created_at: datetime
