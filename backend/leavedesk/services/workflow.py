"""Multi-stage approval workflow for leave request groups.

A group moves MANAGER -> HR -> DIRECTOR -> COMPLETED. Each stage either
approves (the group moves to the next stage) or rejects (the group is
completed as rejected). All checks run before any period is touched, so a
failed transition leaves the group exactly as it was.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from leavedesk.exceptions import (
    MissingApprovalSignature,
    StaleWorkflowState,
    UnauthorizedStageAction,
    WorkflowAlreadyStarted,
)
from leavedesk.models.enums import (
    WORKFLOW_ORDER,
    Decision,
    LeaveStatus,
    StageCapability,
    StageDecision,
    WorkflowStep,
)
from leavedesk.services.grouping import LeaveGroup, ensure_group_consistent

logger = logging.getLogger(__name__)

STAGE_CAPABILITIES: dict[WorkflowStep, StageCapability] = {
    WorkflowStep.MANAGER: StageCapability.REVIEW_MANAGER,
    WorkflowStep.HR: StageCapability.REVIEW_HR,
    WorkflowStep.DIRECTOR: StageCapability.REVIEW_DIRECTOR,
}

_PERMISSION_CAPABILITIES: dict[str, StageCapability] = {
    "approve_leave_manager": StageCapability.REVIEW_MANAGER,
    "approve_leave_hr": StageCapability.REVIEW_HR,
    "approve_leave_director": StageCapability.REVIEW_DIRECTOR,
}

_ROLE_CAPABILITIES: dict[str, frozenset[StageCapability]] = {
    "admin": frozenset(StageCapability),
    "manager": frozenset({StageCapability.REVIEW_MANAGER}),
    "director": frozenset({StageCapability.REVIEW_DIRECTOR}),
}


def resolve_capabilities(role: str, permissions: Iterable[str] = ()) -> frozenset[StageCapability]:
    """Resolve the stages a caller may review from its role and permissions."""
    capabilities = set(_ROLE_CAPABILITIES.get(role, frozenset()))
    for permission in permissions:
        capability = _PERMISSION_CAPABILITIES.get(permission)
        if capability is not None:
            capabilities.add(capability)
    return frozenset(capabilities)


def next_step(step: WorkflowStep) -> WorkflowStep:
    """Return the stage that follows ``step``."""
    if step == WorkflowStep.COMPLETED:
        return step
    return WORKFLOW_ORDER[WORKFLOW_ORDER.index(step) + 1]


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of one successful workflow transition."""

    group_key: uuid.UUID
    stage: WorkflowStep
    decision: Decision
    from_step: WorkflowStep
    to_step: WorkflowStep
    status: LeaveStatus

    @property
    def completed(self) -> bool:
        return self.to_step == WorkflowStep.COMPLETED


def advance(
    group: LeaveGroup,
    decision: Decision,
    actor_stage: WorkflowStep,
    capabilities: frozenset[StageCapability],
    *,
    actor_id: uuid.UUID | None = None,
    signature: str | None = None,
    comment: str | None = None,
    now: datetime | None = None,
) -> TransitionResult:
    """Apply a reviewer decision to every period of ``group``.

    Raises:
        InconsistentRequestGroup: members of the group disagree on their state.
        StaleWorkflowState: the group is completed or not at ``actor_stage``.
        UnauthorizedStageAction: ``capabilities`` do not cover ``actor_stage``.
        MissingApprovalSignature: director approval without a signature.
    """
    ensure_group_consistent(group)

    current = group.workflow_step
    if current == WorkflowStep.COMPLETED:
        raise StaleWorkflowState(f"Request {group.key} has already completed its approval workflow")
    if actor_stage != current:
        raise StaleWorkflowState(f"Request {group.key} is at step {current}, not {actor_stage}")

    if STAGE_CAPABILITIES[current] not in capabilities:
        raise UnauthorizedStageAction(f"Not authorized to review the {current} step")

    if decision == Decision.APPROVE and current == WorkflowStep.DIRECTOR and not signature:
        raise MissingApprovalSignature()

    now = now or datetime.now(UTC)
    prefix = current.lower()

    if decision == Decision.REJECT:
        stage_decision = StageDecision.REJECTED
        target = WorkflowStep.COMPLETED
        status = LeaveStatus.REJECTED
    else:
        stage_decision = StageDecision.APPROVED
        target = next_step(current)
        status = LeaveStatus.APPROVED if target == WorkflowStep.COMPLETED else LeaveStatus.PENDING

    for period in group:
        setattr(period, f"{prefix}_decision", stage_decision.value)
        setattr(period, f"{prefix}_decided_at", now)
        setattr(period, f"{prefix}_decided_by", actor_id)
        setattr(period, f"{prefix}_comment", comment)
        period.workflow_step = target.value
        period.status = status.value
        period.updated_at = now
        if status == LeaveStatus.APPROVED:
            period.signature = signature
            period.approved_by = prefix
            period.approved_at = now

    logger.info("Request %s: %s stage %s, now at %s", group.key, current, decision, target)
    return TransitionResult(
        group_key=group.key,
        stage=current,
        decision=decision,
        from_step=current,
        to_step=target,
        status=status,
    )


def ensure_withdrawable(group: LeaveGroup) -> None:
    """Raise WorkflowAlreadyStarted unless no reviewer has acted on ``group``."""
    ensure_group_consistent(group)
    if group.workflow_step != WorkflowStep.MANAGER or group.has_decision:
        raise WorkflowAlreadyStarted(f"Request {group.key} has already been reviewed")


# ---------------------------------------------------------------------------
# Transition events
# ---------------------------------------------------------------------------

WorkflowListener = Callable[[LeaveGroup, TransitionResult], Awaitable[None]]


class WorkflowEvents:
    """Subscription hub for workflow transitions.

    Listeners are awaited in registration order after the transition has been
    committed.
    """

    def __init__(self) -> None:
        self._stage_advanced: list[WorkflowListener] = []
        self._approved: list[WorkflowListener] = []
        self._rejected: list[WorkflowListener] = []

    @staticmethod
    def _register(listeners: list[WorkflowListener], listener: WorkflowListener) -> WorkflowListener:
        if listener not in listeners:
            listeners.append(listener)
        return listener

    def on_stage_advanced(self, listener: WorkflowListener) -> WorkflowListener:
        """Register a listener for approvals that move the group to another stage."""
        return self._register(self._stage_advanced, listener)

    def on_approved(self, listener: WorkflowListener) -> WorkflowListener:
        """Register a listener for final approvals."""
        return self._register(self._approved, listener)

    def on_rejected(self, listener: WorkflowListener) -> WorkflowListener:
        """Register a listener for rejections."""
        return self._register(self._rejected, listener)

    def clear(self) -> None:
        self._stage_advanced.clear()
        self._approved.clear()
        self._rejected.clear()

    async def dispatch(self, group: LeaveGroup, result: TransitionResult) -> None:
        """Notify listeners matching ``result``."""
        if result.status == LeaveStatus.REJECTED:
            listeners = self._rejected
        elif result.status == LeaveStatus.APPROVED:
            listeners = self._approved
        else:
            listeners = self._stage_advanced
        for listener in listeners:
            await listener(group, result)


_workflow_events = WorkflowEvents()


def get_workflow_events() -> WorkflowEvents:
    """Return the process-wide workflow event hub."""
    return _workflow_events
