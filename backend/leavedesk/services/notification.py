"""Notifications emitted as leave requests move through the workflow.

Delivery is owned by a ``NotificationSink``; this module only decides who is
told what, and supplies the data a certificate renderer needs on approval.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from leavedesk.config import get_settings
from leavedesk.models.enums import CantonCode, Decision, WorkflowStep
from leavedesk.services.duration import count_business_days
from leavedesk.services.employee import EmployeeInfo, get_employee_directory
from leavedesk.services.grouping import LeaveGroup
from leavedesk.services.workflow import TransitionResult, WorkflowEvents

logger = logging.getLogger(__name__)

NoticeKind = Literal["REVIEW_REQUIRED", "APPROVED", "REJECTED"]


class NoticePeriod(BaseModel):
    """A period as listed in a notice or printed on a certificate."""

    period_id: uuid.UUID
    type: str
    start_date: str
    end_date: str
    business_days: int


class LeaveNotice(BaseModel):
    """Everything a sink needs to deliver one notification."""

    kind: NoticeKind
    group_id: uuid.UUID
    recipients: list[str]
    subject: str
    body: str
    stage: WorkflowStep
    canton: CantonCode
    employee_name: str | None = None
    periods: list[NoticePeriod] = Field(default_factory=list)
    signature: str | None = None

    @property
    def period_ids(self) -> list[uuid.UUID]:
        return [p.period_id for p in self.periods]


@runtime_checkable
class NotificationSink(Protocol):
    """Interface for the notification delivery service."""

    async def send(self, notice: LeaveNotice) -> None:
        """Deliver a notice to its recipients."""
        ...


class LoggingNotificationSink:
    """Development sink that writes notices to the log."""

    async def send(self, notice: LeaveNotice) -> None:
        logger.info("Notice %s for request %s to %s: %s", notice.kind, notice.group_id, notice.recipients, notice.subject)


class InMemoryNotificationSink:
    """Sink that keeps every notice, for tests."""

    def __init__(self) -> None:
        self.sent: list[LeaveNotice] = []

    async def send(self, notice: LeaveNotice) -> None:
        self.sent.append(notice)


_notification_sink: NotificationSink = LoggingNotificationSink()


def get_notification_sink() -> NotificationSink:
    """Return the active notification sink."""
    return _notification_sink


def set_notification_sink(sink: NotificationSink) -> None:
    """Override the sink (for testing or production wiring)."""
    global _notification_sink
    _notification_sink = sink


# ---------------------------------------------------------------------------
# Notice construction
# ---------------------------------------------------------------------------

_REVIEW_SUBJECTS: dict[WorkflowStep, str] = {
    WorkflowStep.MANAGER: "Validation manager requise - Congés",
    WorkflowStep.HR: "Validation RH requise - Congés",
    WorkflowStep.DIRECTOR: "Validation Direction requise - Congés",
}


def stage_recipients(step: WorkflowStep) -> list[str]:
    """Configured reviewers to alert when a request reaches ``step``."""
    settings = get_settings()
    if step == WorkflowStep.MANAGER:
        return list(settings.manager_recipients)
    if step == WorkflowStep.HR:
        return list(settings.hr_recipients)
    if step == WorkflowStep.DIRECTOR:
        return list(settings.director_recipients)
    return []


def _notice_periods(group: LeaveGroup, canton: CantonCode) -> list[NoticePeriod]:
    return [
        NoticePeriod(
            period_id=period.id,
            type=period.type,
            start_date=f"{period.start_date:%d.%m.%Y}",
            end_date=f"{period.end_date:%d.%m.%Y}",
            business_days=count_business_days(period.start_date, period.end_date, canton),
        )
        for period in group
    ]


def _format_lines(employee: EmployeeInfo | None, periods: list[NoticePeriod]) -> str:
    name = employee.full_name if employee else ""
    return "\n".join(f"{name} · {p.type} · {p.start_date} → {p.end_date}".strip() for p in periods)


def _unique(emails: list[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for email in emails:
        if email and email.strip():
            seen.setdefault(email.strip(), None)
    return list(seen)


async def build_review_notice(group: LeaveGroup, step: WorkflowStep) -> LeaveNotice | None:
    """Notice asking the reviewers of ``step`` to act, or None if nobody is configured."""
    recipients = stage_recipients(step)
    if not recipients:
        return None
    canton = CantonCode(get_settings().default_canton)
    employee = await get_employee_directory().get_employee(group.employee_id)
    periods = _notice_periods(group, canton)
    body = "\n".join(
        [
            "Bonjour,",
            "",
            f"Une demande de congé nécessite une validation ({step}).",
            "",
            _format_lines(employee, periods),
            "",
            "Merci de traiter la demande dans l'ERP.",
        ]
    )
    return LeaveNotice(
        kind="REVIEW_REQUIRED",
        group_id=group.key,
        recipients=recipients,
        subject=_REVIEW_SUBJECTS[step],
        body=body,
        stage=step,
        canton=canton,
        employee_name=employee.full_name if employee else None,
        periods=periods,
    )


async def build_decision_notice(group: LeaveGroup, result: TransitionResult) -> LeaveNotice | None:
    """Notice telling the applicant (and, on approval, the leave office) the outcome."""
    settings = get_settings()
    canton = CantonCode(settings.default_canton)
    employee = await get_employee_directory().get_employee(group.employee_id)
    periods = _notice_periods(group, canton)
    lines = _format_lines(employee, periods)
    applicant = employee.email if employee else None

    if result.completed and result.decision == Decision.APPROVE:
        recipients = _unique([*settings.approval_recipients, applicant])
        subject = f"Congés approuvés ({len(periods)}) - {canton}"
        outcome = "Votre demande a été approuvée par la direction."
        kind: NoticeKind = "APPROVED"
        signature = group.lead.signature
    else:
        recipients = _unique([applicant])
        subject = "Votre demande de congé a été refusée"
        outcome = f"Votre demande a été refusée lors de l'étape {result.stage}."
        kind = "REJECTED"
        signature = None

    if not recipients:
        return None
    return LeaveNotice(
        kind=kind,
        group_id=group.key,
        recipients=recipients,
        subject=subject,
        body="\n".join(["Bonjour,", "", outcome, "", lines, "", "Merci de prendre note."]),
        stage=result.stage,
        canton=canton,
        employee_name=employee.full_name if employee else None,
        periods=periods,
        signature=signature,
    )


async def _deliver(build: Awaitable[LeaveNotice | None], kind: str, group: LeaveGroup) -> None:
    try:
        notice = await build
        if notice is not None:
            await get_notification_sink().send(notice)
    except Exception:
        logger.exception("Failed to deliver %s notice for request %s", kind, group.key)


async def notify_stage_reviewers(group: LeaveGroup, step: WorkflowStep) -> None:
    """Alert the reviewers of ``step`` that ``group`` awaits them."""
    await _deliver(build_review_notice(group, step), "REVIEW_REQUIRED", group)


async def _on_stage_advanced(group: LeaveGroup, result: TransitionResult) -> None:
    await notify_stage_reviewers(group, result.to_step)


async def _on_decided(group: LeaveGroup, result: TransitionResult) -> None:
    await _deliver(build_decision_notice(group, result), "decision", group)


def register_notification_handlers(events: WorkflowEvents) -> None:
    """Subscribe the notification handlers to workflow events."""
    events.on_stage_advanced(_on_stage_advanced)
    events.on_approved(_on_decided)
    events.on_rejected(_on_decided)
