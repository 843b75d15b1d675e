"""Quote intake API schemas.

Unknown keys are collected (extra="allow") rather than failing validation so
the anti-abuse gate can reject them with its generic response and log them.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

# International formats: +1-234-567-8900, (123) 456-7890
PHONE_PATTERN = r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}$"


class QuoteCreateRequest(BaseModel):
    """Public quote form.

    honeypot, form_started_at_ms and captcha_token are anti-abuse signals, never stored.
    """

    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=100)
    company: str | None = Field(default=None, max_length=150)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    whatsapp: str | None = Field(default=None, pattern=PHONE_PATTERN)
    product_name: str | None = Field(
        default=None, max_length=255, validation_alias=AliasChoices("product_name", "productName")
    )
    quantity: str | None = Field(default=None, max_length=50)
    project_details: str | None = Field(
        default=None,
        max_length=1000,
        validation_alias=AliasChoices("project_details", "projectDetails"),
    )
    # Anti-abuse signals are taken as sent; the gate judges them so a bad value
    # gets the generic rejection instead of a validation error naming the field.
    honeypot: Any = None
    form_started_at_ms: Any = Field(
        default=None, validation_alias=AliasChoices("form_started_at_ms", "formStartTs")
    )
    captcha_token: Any = Field(
        default=None, validation_alias=AliasChoices("captcha_token", "captchaToken")
    )

    def unknown_fields(self) -> list[str]:
        return sorted((self.model_extra or {}).keys())


class QuoteAcceptedResponse(BaseModel):
    """Public acknowledgement: reference number only."""

    reference: str
    message: str = "Quote request received"


class QuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    reference: str
    name: str
    company: str | None = None
    email: str
    phone: str
    whatsapp: str | None = None
    product_name: str | None = None
    quantity: str | None = None
    project_details: str | None = None
    status: str
    created_at: datetime


class QuoteListResponse(BaseModel):
    items: list[QuoteResponse]
    total: int
    skip: int
    limit: int
