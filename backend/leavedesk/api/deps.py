# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from leavedesk.schemas.auth import AuthContext
from leavedesk.services.workflow import resolve_capabilities


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: str = Header(default="employee"),
    x_permissions: str = Header(default=""),
) -> AuthContext:
    """Extract dev auth context from request headers.

    Stage capabilities are resolved once here from the role and the
    comma-separated permission list.
    """
    permissions = [p.strip() for p in x_permissions.split(",") if p.strip()]
    return AuthContext(
        user_id=x_user_id,
        role=x_role,
        permissions=permissions,
        capabilities=resolve_capabilities(x_role, permissions),
    )


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]
