from __future__ import annotations

import uuid
from datetime import date

import pytest
from conftest import make_period

from leavedesk.exceptions import InconsistentRequestGroup
from leavedesk.models.enums import LeaveStatus, StageDecision, WorkflowStep
from leavedesk.services.grouping import LeaveGroup, ensure_group_consistent, group_periods

GROUP_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")


def test_periods_sharing_a_group_id_are_grouped() -> None:
    employee_id = uuid.uuid4()
    first = make_period(date(2024, 7, 1), date(2024, 7, 5), employee_id=employee_id, group_id=GROUP_ID)
    second = make_period(date(2024, 7, 8), date(2024, 7, 8), employee_id=employee_id, group_id=GROUP_ID)

    groups = group_periods([first, second])

    assert len(groups) == 1
    assert groups[0].key == GROUP_ID
    assert groups[0].periods == [first, second]
    assert groups[0].employee_id == employee_id


def test_ungrouped_periods_become_singletons() -> None:
    a = make_period(date(2024, 7, 1), date(2024, 7, 2))
    b = make_period(date(2024, 7, 1), date(2024, 7, 2))

    groups = group_periods([a, b])

    assert [g.key for g in groups] == [a.id, b.id]
    assert all(len(g) == 1 for g in groups)


def test_groups_keep_first_appearance_order() -> None:
    other_group = uuid.uuid4()
    a = make_period(date(2024, 7, 1), date(2024, 7, 2), group_id=other_group)
    b = make_period(date(2024, 7, 3), date(2024, 7, 4), group_id=GROUP_ID)
    c = make_period(date(2024, 7, 5), date(2024, 7, 6), group_id=other_group)

    groups = group_periods([a, b, c])

    assert [g.key for g in groups] == [other_group, GROUP_ID]
    assert groups[0].periods == [a, c]


def test_group_state_is_read_from_lead() -> None:
    period = make_period(date(2024, 7, 1), date(2024, 7, 2), step=WorkflowStep.HR)
    period.manager_decision = StageDecision.APPROVED
    group = LeaveGroup(key=period.id, periods=[period])

    assert group.workflow_step == WorkflowStep.HR
    assert group.status == LeaveStatus.PENDING
    assert group.stage_decision(WorkflowStep.MANAGER) == StageDecision.APPROVED
    assert group.stage_decision(WorkflowStep.HR) is None
    assert group.has_decision


def test_consistent_group_passes() -> None:
    a = make_period(date(2024, 7, 1), date(2024, 7, 2), group_id=GROUP_ID)
    b = make_period(date(2024, 7, 3), date(2024, 7, 4), group_id=GROUP_ID)
    ensure_group_consistent(LeaveGroup(key=GROUP_ID, periods=[a, b]))


def test_diverging_step_is_inconsistent() -> None:
    a = make_period(date(2024, 7, 1), date(2024, 7, 2), group_id=GROUP_ID)
    b = make_period(date(2024, 7, 3), date(2024, 7, 4), group_id=GROUP_ID, step=WorkflowStep.HR)

    with pytest.raises(InconsistentRequestGroup):
        ensure_group_consistent(LeaveGroup(key=GROUP_ID, periods=[a, b]))


def test_diverging_stage_decision_is_inconsistent() -> None:
    a = make_period(date(2024, 7, 1), date(2024, 7, 2), group_id=GROUP_ID)
    b = make_period(date(2024, 7, 3), date(2024, 7, 4), group_id=GROUP_ID)
    b.manager_decision = StageDecision.APPROVED

    with pytest.raises(InconsistentRequestGroup):
        ensure_group_consistent(LeaveGroup(key=GROUP_ID, periods=[a, b]))


def test_empty_group_is_inconsistent() -> None:
    with pytest.raises(InconsistentRequestGroup):
        ensure_group_consistent(LeaveGroup(key=GROUP_ID))
