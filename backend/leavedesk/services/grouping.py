# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from leavedesk.exceptions import InconsistentRequestGroup
from leavedesk.models.enums import LeaveStatus, StageDecision, WorkflowStep
from leavedesk.models.leave import LeavePeriod

# Fields every member of a request group must agree on.
_GROUP_STATE_FIELDS = ("workflow_step", "status", "manager_decision", "hr_decision", "director_decision")


@dataclass
class LeaveGroup:
    """Periods submitted together as one leave request."""

    key: uuid.UUID
    periods: list[LeavePeriod] = field(default_factory=list)

    def __iter__(self) -> Iterator[LeavePeriod]:
        return iter(self.periods)

    def __len__(self) -> int:
        return len(self.periods)

    @property
    def lead(self) -> LeavePeriod:
        """First member; its state stands for the whole group."""
        return self.periods[0]

    @property
    def employee_id(self) -> uuid.UUID:
        return self.lead.employee_id

    @property
    def workflow_step(self) -> WorkflowStep:
        return WorkflowStep(self.lead.workflow_step)

    @property
    def status(self) -> LeaveStatus:
        return LeaveStatus(self.lead.status)

    def stage_decision(self, step: WorkflowStep) -> StageDecision | None:
        value = getattr(self.lead, f"{step.lower()}_decision")
        return StageDecision(value) if value is not None else None

    @property
    def has_decision(self) -> bool:
        return any(
            getattr(self.lead, name) is not None for name in ("manager_decision", "hr_decision", "director_decision")
        )


def group_periods(periods: Iterable[LeavePeriod]) -> list[LeaveGroup]:
    """Collapse periods sharing a request_group_id into groups.

    Periods without a group id become singleton groups keyed by their own id.
    Groups are returned in order of first appearance.
    """
    groups: dict[uuid.UUID, LeaveGroup] = {}
    for period in periods:
        key = period.group_key
        group = groups.get(key)
        if group is None:
            group = groups[key] = LeaveGroup(key=key)
        group.periods.append(period)
    return list(groups.values())


def ensure_group_consistent(group: LeaveGroup) -> None:
    """Raise InconsistentRequestGroup if members disagree on workflow state."""
    if not group.periods:
        raise InconsistentRequestGroup(f"Request group {group.key} has no periods")
    lead = group.lead
    for period in group.periods[1:]:
        for name in _GROUP_STATE_FIELDS:
            if getattr(period, name) != getattr(lead, name):
                raise InconsistentRequestGroup(
                    f"Period {period.id} disagrees with request group {group.key} on {name}"
                )
