# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AuthDep
from leavedesk.db import SessionDep
from leavedesk.models.enums import LeaveStatus, WorkflowStep
from leavedesk.schemas.leave import (
    ConflictListResponse,
    DecisionPayload,
    LeaveGroupListResponse,
    LeaveGroupResponse,
    LeaveListResponse,
    RequestHistoryResponse,
    SubmitLeavePayload,
)
from leavedesk.services import leave as leave_service

leaves_router = APIRouter(prefix="/leaves", tags=["leaves"])


@leaves_router.post("", response_model=LeaveGroupResponse, status_code=status.HTTP_201_CREATED)
async def submit_leave(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveGroupResponse:
    """Submit a leave request made of one or more periods."""
    return await leave_service.submit_leave(session, auth, payload)


@leaves_router.get("", response_model=LeaveListResponse)
async def list_leaves(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=1900, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
) -> LeaveListResponse:
    """List leave periods with optional filters."""
    return await leave_service.list_leaves(session, year, month, status_filter, employee_id, offset, limit)


@leaves_router.get("/pending", response_model=LeaveGroupListResponse)
async def list_pending(
    session: SessionDep,
    auth: AuthDep,
    step: WorkflowStep | None = Query(default=None),
) -> LeaveGroupListResponse:
    """Requests awaiting review, with staffing conflicts flagged (reviewers only)."""
    return await leave_service.list_pending_groups(session, auth, step)


@leaves_router.get("/calendar", response_model=LeaveListResponse)
async def calendar_leaves(
    session: SessionDep,
    auth: AuthDep,
    start: date = Query(),
    end: date = Query(),
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
) -> LeaveListResponse:
    """Leave overlapping a date window, optionally of one status."""
    return await leave_service.calendar_leaves(session, start, end, status_filter)


@leaves_router.get("/conflicts", response_model=ConflictListResponse)
async def list_conflicts(
    session: SessionDep,
    auth: AuthDep,
) -> ConflictListResponse:
    """Pending periods that overlap within the same department and role."""
    return await leave_service.detect_conflicts(session)


@leaves_router.get("/{period_id}/group", response_model=LeaveGroupResponse)
async def get_group(
    period_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveGroupResponse:
    """Get the request a period belongs to."""
    return await leave_service.get_group(session, period_id)


@leaves_router.get("/{period_id}/history", response_model=RequestHistoryResponse)
async def request_history(
    period_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> RequestHistoryResponse:
    """Audit trail of the request a period belongs to."""
    return await leave_service.request_history(session, period_id)


@leaves_router.post("/{period_id}/decision", response_model=LeaveGroupResponse)
async def decide(
    period_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveGroupResponse:
    """Approve or reject the current workflow step of a request."""
    return await leave_service.decide(session, auth, period_id, payload)


@leaves_router.delete("/{period_id}", status_code=status.HTTP_204_NO_CONTENT)
async def withdraw(
    period_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    whole_group: bool = Query(default=True),
) -> None:
    """Withdraw a request, or a single period of it, before any review."""
    await leave_service.withdraw(session, auth, period_id, whole_group)
