from sqlmodel import SQLModel

from leavedesk.models.audit import AuditLog
from leavedesk.models.base import TimestampMixin, UUIDBase
from leavedesk.models.enums import (
    AuditAction,
    AuditEntityType,
    CantonCode,
    Decision,
    LeaveStatus,
    LeaveType,
    StageCapability,
    StageDecision,
    WorkflowStep,
)
from leavedesk.models.leave import LeavePeriod

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CantonCode",
    "Decision",
    "LeavePeriod",
    "LeaveStatus",
    "LeaveType",
    "SQLModel",
    "StageCapability",
    "StageDecision",
    "TimestampMixin",
    "UUIDBase",
    "WorkflowStep",
]
