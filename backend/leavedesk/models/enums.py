from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Kind of absence covered by a leave period."""

    VACATION = "VACATION"
    SICKNESS = "SICKNESS"
    ACCIDENT = "ACCIDENT"
    BEREAVEMENT = "BEREAVEMENT"
    TRAINING = "TRAINING"
    OVERTIME_RECOVERY = "OVERTIME_RECOVERY"
    MILITARY_SERVICE = "MILITARY_SERVICE"


class LeaveStatus(enum.StrEnum):
    """Aggregate outcome of a leave request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class WorkflowStep(enum.StrEnum):
    """Approval stage a leave request is waiting on."""

    MANAGER = "MANAGER"
    HR = "HR"
    DIRECTOR = "DIRECTOR"
    COMPLETED = "COMPLETED"


WORKFLOW_ORDER: tuple[WorkflowStep, ...] = (
    WorkflowStep.MANAGER,
    WorkflowStep.HR,
    WorkflowStep.DIRECTOR,
    WorkflowStep.COMPLETED,
)


class Decision(enum.StrEnum):
    """Reviewer input for a workflow stage."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


class StageDecision(enum.StrEnum):
    """Outcome recorded for a single workflow stage."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class StageCapability(enum.StrEnum):
    """Permission to review one workflow stage."""

    REVIEW_MANAGER = "REVIEW_MANAGER"
    REVIEW_HR = "REVIEW_HR"
    REVIEW_DIRECTOR = "REVIEW_DIRECTOR"


class CantonCode(enum.StrEnum):
    """Swiss cantons with a supported holiday calendar."""

    VD = "VD"
    GE = "GE"
    FR = "FR"
    VS = "VS"
    NE = "NE"
    ZH = "ZH"
    BE = "BE"
    TI = "TI"
    JU = "JU"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_PERIOD = "LEAVE_PERIOD"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    DELETE = "DELETE"
