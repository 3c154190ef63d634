# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from leavedesk.models.enums import Decision, LeaveStatus, LeaveType, StageDecision, WorkflowStep

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class PeriodInput(BaseModel):
    """One date range of a leave submission."""

    type: LeaveType
    start_date: date
    end_date: date


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a leave request of one or more periods."""

    employee_id: uuid.UUID
    periods: list[PeriodInput] = Field(min_length=1)
    comment: str | None = Field(default=None, max_length=2000)
    signature: str | None = None
    military_start_date: date | None = None
    military_end_date: date | None = None
    military_reference: str | None = Field(default=None, max_length=255)


class DecisionPayload(BaseModel):
    """Request body for a reviewer decision on the current workflow step."""

    decision: Decision
    stage: WorkflowStep
    signature: str | None = None
    comment: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeavePeriodResponse(BaseModel):
    """Response schema for a single leave period."""

    id: uuid.UUID
    employee_id: uuid.UUID
    type: LeaveType
    start_date: date
    end_date: date
    business_days: int
    status: LeaveStatus
    workflow_step: WorkflowStep
    request_group_id: uuid.UUID | None
    manager_decision: StageDecision | None
    hr_decision: StageDecision | None
    director_decision: StageDecision | None
    military_start_date: date | None
    military_end_date: date | None
    military_reference: str | None
    comment: str | None
    approved_by: str | None
    approved_at: datetime | None
    created_at: datetime


class LeaveListResponse(BaseModel):
    """List of leave periods."""

    items: list[LeavePeriodResponse]
    total: int


class ConflictDetailResponse(BaseModel):
    """Bucket in which a pending period overlaps another."""

    department: str
    role: str


class LeaveGroupResponse(BaseModel):
    """A leave request: the periods submitted together and their shared state."""

    group_id: uuid.UUID
    employee_id: uuid.UUID
    status: LeaveStatus
    workflow_step: WorkflowStep
    periods: list[LeavePeriodResponse]
    conflict: ConflictDetailResponse | None = None


class LeaveGroupListResponse(BaseModel):
    """List of leave requests."""

    items: list[LeaveGroupResponse]
    total: int


class ConflictEntryResponse(BaseModel):
    """One conflicting pending period."""

    period_id: uuid.UUID
    department: str
    role: str


class ConflictListResponse(BaseModel):
    """Pending periods overlapping another pending period of the same bucket."""

    items: list[ConflictEntryResponse]
    total: int


class AuditEntryResponse(BaseModel):
    """One audited change to a period of a request."""

    id: uuid.UUID
    actor_id: uuid.UUID
    period_id: uuid.UUID
    action: str
    before_json: dict[str, Any] | None
    after_json: dict[str, Any] | None
    created_at: datetime


class RequestHistoryResponse(BaseModel):
    """Audit trail of a request, oldest entry first."""

    group_id: uuid.UUID
    items: list[AuditEntryResponse]
    total: int
