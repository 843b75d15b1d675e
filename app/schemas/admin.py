"""Admin management API schemas."""

from pydantic import BaseModel, ConfigDict

from app.domain.enums import AdminRole


class RoleChangeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: AdminRole
