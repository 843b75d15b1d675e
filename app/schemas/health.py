"""Liveness and readiness payloads."""

from typing import Literal

from pydantic import BaseModel, Field

CheckState = Literal["ok", "unavailable"]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ReadinessResponse(BaseModel):
    """GET /health/ready. Each dependency reports ok or unavailable."""

    status: Literal["ok", "not_ready"] = "ok"
    checks: dict[str, CheckState] = Field(
        default_factory=dict, description="Keys: database, counter_store"
    )
