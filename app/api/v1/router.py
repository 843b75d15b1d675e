"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import admins, audit_logs, auth, health, quotes, two_factor

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(two_factor.router, prefix="/auth/2fa", tags=["two-factor"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
api_router.include_router(admins.router, prefix="/admins", tags=["admins"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit-logs"])
