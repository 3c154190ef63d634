# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UUIDBase
from leavedesk.models.enums import LeaveStatus, WorkflowStep


class LeavePeriod(UUIDBase, TimestampMixin, table=True):
    """One date range of a leave request, carrying its approval workflow state.

    Periods submitted together share a ``request_group_id`` and always move
    through the workflow as one unit.
    """

    __tablename__ = "leave_period"
    __table_args__ = (
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_period_range"),
        sa.Index("ix_leave_period_dates", "start_date", "end_date"),
        sa.Index("ix_leave_period_step", "workflow_step", "status"),
    )

    employee_id: uuid.UUID = Field(index=True)
    type: str = Field(max_length=50)
    start_date: date
    end_date: date
    status: str = Field(default=LeaveStatus.PENDING, max_length=50, sa_column_kwargs={"server_default": "PENDING"})
    workflow_step: str = Field(
        default=WorkflowStep.MANAGER, max_length=50, sa_column_kwargs={"server_default": "MANAGER"}
    )
    request_group_id: uuid.UUID | None = Field(default=None, index=True)

    manager_decision: str | None = Field(default=None, max_length=50)
    manager_decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    manager_decided_by: uuid.UUID | None = None
    manager_comment: str | None = None

    hr_decision: str | None = Field(default=None, max_length=50)
    hr_decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    hr_decided_by: uuid.UUID | None = None
    hr_comment: str | None = None

    director_decision: str | None = Field(default=None, max_length=50)
    director_decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    director_decided_by: uuid.UUID | None = None
    director_comment: str | None = None

    military_start_date: date | None = None
    military_end_date: date | None = None
    military_reference: str | None = Field(default=None, max_length=255)

    signature: str | None = None
    comment: str | None = None
    approved_by: str | None = Field(default=None, max_length=50)
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]

    @property
    def group_key(self) -> uuid.UUID:
        """Identifier of the request this period belongs to."""
        return self.request_group_id if self.request_group_id is not None else self.id
