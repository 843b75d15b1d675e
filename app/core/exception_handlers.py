"""Exception to HTTP response mapping.

Every error body has the shape {"error": CODE, "message": str, "details"?: ...}.
Authentication failures carry WWW-Authenticate; codes in _PRIVATE_DETAIL_CODES
never expose details, because those name internal stores or abuse rules.
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.constants import TOO_MANY_REQUESTS_MESSAGE
from app.domain.exceptions import CatalogException
from app.shared.context import get_request_id

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, HTTPStatus] = {
    "AUTHENTICATION_ERROR": HTTPStatus.UNAUTHORIZED,
    "PERMISSION_DENIED": HTTPStatus.FORBIDDEN,
    "RESOURCE_NOT_FOUND": HTTPStatus.NOT_FOUND,
    "VALIDATION_ERROR": HTTPStatus.BAD_REQUEST,
    "INVALID_REQUEST": HTTPStatus.BAD_REQUEST,
    "TWO_FACTOR_STATE_ERROR": HTTPStatus.CONFLICT,
    "ADMIN_ALREADY_EXISTS": HTTPStatus.CONFLICT,
    "RATE_LIMITED": HTTPStatus.TOO_MANY_REQUESTS,
    "SERVICE_UNAVAILABLE": HTTPStatus.SERVICE_UNAVAILABLE,
}

_PRIVATE_DETAIL_CODES = frozenset({"SERVICE_UNAVAILABLE", "INVALID_REQUEST", "RATE_LIMITED"})

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _error_body(code: str, message: str, details=None) -> dict:
    body = {"error": code, "message": message}
    if details:
        body["details"] = details
    return body


def _handle_catalog_error(request: Request, exc: CatalogException) -> JSONResponse:
    status = _ERROR_CODE_STATUS.get(exc.error_code, HTTPStatus.BAD_REQUEST)
    content = exc.to_dict()
    if exc.error_code in _PRIVATE_DETAIL_CODES:
        content.pop("details", None)
    if status == HTTPStatus.SERVICE_UNAVAILABLE:
        logger.error("%s %s: %s unavailable", request.method, request.url.path, exc.details)
    return JSONResponse(
        status_code=status,
        content=content,
        headers=_BEARER_CHALLENGE if status == HTTPStatus.UNAUTHORIZED else None,
    )


def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 listing location, message and type per error; submitted values are not echoed."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
        content=_error_body("VALIDATION_ERROR", "Request validation failed", errors),
    )


def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """slowapi limit hit: same body as the quote gate's own 429."""
    logger.warning("Rate limit %s exceeded on %s", exc.detail, request.url.path)
    return JSONResponse(
        status_code=HTTPStatus.TOO_MANY_REQUESTS,
        content=_error_body("RATE_LIMITED", TOO_MANY_REQUESTS_MESSAGE),
    )


def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """500 carrying the request id so the caller can quote it; the exception text only in debug."""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_ERROR", message, {"request_id": get_request_id()}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogException, _handle_catalog_error)
    app.add_exception_handler(RateLimitExceeded, _handle_rate_limit)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)
