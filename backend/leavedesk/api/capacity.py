# ruff: noqa: B008, TC001
from __future__ import annotations

from fastapi import APIRouter, Query

from leavedesk.api.deps import AuthDep
from leavedesk.db import SessionDep
from leavedesk.schemas.capacity import CapacityAlertListResponse, SimulationPayload, SimulationResponse
from leavedesk.services import leave as leave_service

capacity_router = APIRouter(prefix="/capacity", tags=["capacity"])


@capacity_router.post("/simulate", response_model=SimulationResponse)
async def simulate_capacity(
    payload: SimulationPayload,
    session: SessionDep,
    auth: AuthDep,
) -> SimulationResponse:
    """Weekly staffing of a department for a month, with what-if absences."""
    return await leave_service.simulate_capacity(session, payload)


@capacity_router.get("/alerts", response_model=CapacityAlertListResponse)
async def capacity_alerts(
    session: SessionDep,
    auth: AuthDep,
    year: int = Query(ge=1900, le=9999),
    month: int = Query(ge=1, le=12),
) -> CapacityAlertListResponse:
    """Weeks of a month where a department falls below its minimum staffing."""
    return await leave_service.capacity_alerts_for_month(session, year, month)
