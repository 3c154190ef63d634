# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from leavedesk.models.enums import StageCapability


class AuthContext(BaseModel):
    """Dev auth context extracted from request headers."""

    user_id: uuid.UUID
    role: str = "employee"
    permissions: list[str] = Field(default_factory=list)
    capabilities: frozenset[StageCapability] = frozenset()

    @property
    def can_review(self) -> bool:
        return bool(self.capabilities)
