# ruff: noqa: B008, TC001
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from leavedesk.api.deps import AuthDep
from leavedesk.config import get_settings
from leavedesk.db import SessionDep
from leavedesk.models.enums import CantonCode
from leavedesk.schemas.balance import LeaveBalanceListResponse
from leavedesk.services import balance as balance_service

balances_router = APIRouter(prefix="/leave-balances", tags=["balances"])


@balances_router.get("", response_model=LeaveBalanceListResponse)
async def list_balances(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=1900, le=9999),
) -> LeaveBalanceListResponse:
    """Paid leave entitlement and approved vacation days per employee."""
    canton = CantonCode(get_settings().default_canton)
    return await balance_service.list_balances(session, year or date.today().year, canton)
