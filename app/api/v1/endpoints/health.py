"""Health check endpoints: liveness, and readiness of the database and counter store."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.domain.exceptions import StoreUnavailableException
from app.infrastructure.persistence.database import get_session_factory
from app.schemas.health import HealthResponse, ReadinessResponse
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


async def _database_ok() -> bool:
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, StoreUnavailableException, OSError):
        logger.warning("Readiness: database check failed", exc_info=True)
        return False


async def _counter_store_ok(request: Request) -> bool:
    store = getattr(request.app.state, "counter_store", None)
    if store is None:
        return False
    try:
        return await store.ping()
    except StoreUnavailableException:
        return False


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "A dependency is unreachable", "model": ReadinessResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 when the database and counter store respond; 503 otherwise."""
    checks = {
        "database": "ok" if await _database_ok() else "unavailable",
        "counter_store": "ok" if await _counter_store_ok(request) else "unavailable",
    }
    if all(v == "ok" for v in checks.values()):
        return ReadinessResponse(checks=checks)
    return JSONResponse(
        status_code=503,
        content=ReadinessResponse(status="not_ready", checks=checks).model_dump(),
    )
