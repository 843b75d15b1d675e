"""Quote API: public intake behind the anti-abuse gate, staff listing."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.v1.dependencies import (
    get_client_context,
    get_quote_service,
    require_permission,
)
from app.application.dtos.auth import ClientContext, Principal
from app.application.dtos.quote import QuoteSubmission
from app.application.services import QuoteService
from app.core.limiter import limit_quote_submit
from app.domain.enums import PermissionAction
from app.schemas.quote import (
    QuoteAcceptedResponse,
    QuoteCreateRequest,
    QuoteListResponse,
    QuoteResponse,
)
from app.shared.enums import QuoteStatus

router = APIRouter()

QuoteServiceDep = Annotated[QuoteService, Depends(get_quote_service)]


@router.post("", response_model=QuoteAcceptedResponse, status_code=status.HTTP_201_CREATED)
@limit_quote_submit
async def submit_quote(
    request: Request,
    body: QuoteCreateRequest,
    quote_service: QuoteServiceDep,
    client: Annotated[ClientContext, Depends(get_client_context)],
):
    """Public quote form. Rejections never say which check fired."""
    submission = QuoteSubmission(
        name=body.name,
        email=str(body.email),
        phone=body.phone,
        company=body.company,
        whatsapp=body.whatsapp,
        product_name=body.product_name,
        quantity=body.quantity,
        project_details=body.project_details,
        honeypot=body.honeypot,
        form_started_at_ms=body.form_started_at_ms,
        captcha_token=body.captcha_token,
    )
    quote = await quote_service.submit(submission, body.unknown_fields(), client)
    return QuoteAcceptedResponse(reference=quote.reference)


@router.get("", response_model=QuoteListResponse)
async def list_quotes(
    quote_service: QuoteServiceDep,
    _: Annotated[Principal, Depends(require_permission("quote", PermissionAction.READ.value))],
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    status_filter: QuoteStatus | None = Query(None, alias="status"),
):
    items, total = await quote_service.list_quotes(
        skip=skip, limit=limit, status=status_filter.value if status_filter else None
    )
    return QuoteListResponse(
        items=[QuoteResponse.model_validate(q) for q in items],
        total=total,
        skip=skip,
        limit=limit,
    )
