# ruff: noqa: TC003
from __future__ import annotations

import calendar
import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leavedesk.config import get_settings
from leavedesk.exceptions import AppError, EmployeeNotResolvable
from leavedesk.models.enums import (
    AuditAction,
    CantonCode,
    Decision,
    LeaveStatus,
    LeaveType,
    StageCapability,
    WorkflowStep,
)
from leavedesk.models.leave import LeavePeriod
from leavedesk.schemas.capacity import (
    CapacityAlertListResponse,
    CapacityAlertResponse,
    SimulatedAbsenceInput,
    SimulationResponse,
    WeekCapacityResponse,
)
from leavedesk.schemas.leave import (
    AuditEntryResponse,
    ConflictDetailResponse,
    ConflictEntryResponse,
    ConflictListResponse,
    LeaveGroupListResponse,
    LeaveGroupResponse,
    LeaveListResponse,
    LeavePeriodResponse,
    RequestHistoryResponse,
)
from leavedesk.services.audit import list_group_entries, period_to_audit_dict, record_period_change
from leavedesk.services.capacity import (
    SimulatedAbsence,
    capacity_alerts,
    minimum_staff_for,
    seed_hypothetical_absences,
    simulate,
    week_ranges_for_month,
)
from leavedesk.services.conflict import ConflictReport, find_conflicts
from leavedesk.services.duration import count_business_days, ensure_date_range
from leavedesk.services.employee import build_employee_lookup, get_employee_directory, headcount_by_department
from leavedesk.services.grouping import LeaveGroup, group_periods
from leavedesk.services.notification import notify_stage_reviewers
from leavedesk.services.workflow import advance, ensure_withdrawable, get_workflow_events

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.capacity import SimulationPayload
    from leavedesk.schemas.leave import DecisionPayload, SubmitLeavePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _canton() -> CantonCode:
    return CantonCode(get_settings().default_canton)


def _build_period_response(period: LeavePeriod, canton: CantonCode) -> LeavePeriodResponse:
    """Map a period model to its response schema."""
    return LeavePeriodResponse(
        id=period.id,
        employee_id=period.employee_id,
        type=LeaveType(period.type),
        start_date=period.start_date,
        end_date=period.end_date,
        business_days=count_business_days(period.start_date, period.end_date, canton),
        status=LeaveStatus(period.status),
        workflow_step=WorkflowStep(period.workflow_step),
        request_group_id=period.request_group_id,
        manager_decision=period.manager_decision,
        hr_decision=period.hr_decision,
        director_decision=period.director_decision,
        military_start_date=period.military_start_date,
        military_end_date=period.military_end_date,
        military_reference=period.military_reference,
        comment=period.comment,
        approved_by=period.approved_by,
        approved_at=period.approved_at,
        created_at=period.created_at,
    )


def _build_group_response(
    group: LeaveGroup,
    canton: CantonCode,
    conflicts: ConflictReport | None = None,
) -> LeaveGroupResponse:
    conflict = None
    if conflicts:
        detail = next((conflicts.details[p.id] for p in group if p.id in conflicts), None)
        if detail is not None:
            conflict = ConflictDetailResponse(department=detail.department, role=detail.role)
    return LeaveGroupResponse(
        group_id=group.key,
        employee_id=group.employee_id,
        status=group.status,
        workflow_step=group.workflow_step,
        periods=[_build_period_response(p, canton) for p in group],
        conflict=conflict,
    )


async def _get_period_or_404(session: AsyncSession, period_id: uuid.UUID) -> LeavePeriod:
    result = await session.execute(select(LeavePeriod).where(col(LeavePeriod.id) == period_id))
    period = result.scalar_one_or_none()
    if period is None:
        raise AppError("Leave period not found", status_code=404)
    return period


async def _load_group(session: AsyncSession, period_id: uuid.UUID, *, for_update: bool = False) -> LeaveGroup:
    """Load every period of the request ``period_id`` belongs to.

    With ``for_update`` the rows stay locked until the transaction ends, so
    concurrent reviewers of the same group are serialized.
    """
    period = await _get_period_or_404(session, period_id)
    if period.request_group_id is None:
        query = select(LeavePeriod).where(col(LeavePeriod.id) == period.id)
    else:
        query = select(LeavePeriod).where(col(LeavePeriod.request_group_id) == period.request_group_id)
    query = query.order_by(col(LeavePeriod.start_date), col(LeavePeriod.id))
    if for_update:
        query = query.with_for_update()
        # Re-read the rows under the lock, not the identity-map copies.
        query = query.execution_options(populate_existing=True)

    result = await session.execute(query)
    return LeaveGroup(key=period.group_key, periods=list(result.scalars().all()))


async def _fetch_periods(
    session: AsyncSession,
    *,
    statuses: list[LeaveStatus] | None = None,
    start: date | None = None,
    end: date | None = None,
    employee_id: uuid.UUID | None = None,
) -> list[LeavePeriod]:
    """Fetch periods with the given statuses overlapping ``[start, end]``."""
    query = select(LeavePeriod)
    if employee_id is not None:
        query = query.where(col(LeavePeriod.employee_id) == employee_id)
    if statuses is not None:
        query = query.where(col(LeavePeriod.status).in_([s.value for s in statuses]))
    if start is not None:
        query = query.where(col(LeavePeriod.end_date) >= start)
    if end is not None:
        query = query.where(col(LeavePeriod.start_date) <= end)
    result = await session.execute(query.order_by(col(LeavePeriod.start_date), col(LeavePeriod.id)))
    return list(result.scalars().all())


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


async def submit_leave(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeavePayload,
) -> LeaveGroupResponse:
    """Submit a leave request: all periods start PENDING at the MANAGER step.

    Flow:
    1. Resolve the employee (must exist in the directory)
    2. Validate every date range
    3. Create the periods under one request group id
    4. Write audit log entries
    5. Commit, then alert the manager-stage reviewers
    """
    employee = await get_employee_directory().get_employee(payload.employee_id)
    if employee is None:
        raise EmployeeNotResolvable(f"Employee {payload.employee_id} could not be resolved")

    for index, period_input in enumerate(payload.periods, start=1):
        ensure_date_range(period_input.start_date, period_input.end_date, label=f"period {index}")
    if payload.military_start_date is not None and payload.military_end_date is not None:
        ensure_date_range(payload.military_start_date, payload.military_end_date, label="military service")

    group_id = uuid.uuid4()
    periods = []
    for period_input in payload.periods:
        is_military = period_input.type == LeaveType.MILITARY_SERVICE
        period = LeavePeriod(
            employee_id=employee.id,
            type=period_input.type.value,
            start_date=period_input.start_date,
            end_date=period_input.end_date,
            status=LeaveStatus.PENDING.value,
            workflow_step=WorkflowStep.MANAGER.value,
            request_group_id=group_id,
            comment=payload.comment,
            signature=payload.signature,
            military_start_date=payload.military_start_date if is_military else None,
            military_end_date=payload.military_end_date if is_military else None,
            military_reference=payload.military_reference if is_military else None,
        )
        session.add(period)
        periods.append(period)

    await session.flush()

    for period in periods:
        record_period_change(
            session,
            actor_id=auth.user_id,
            period=period,
            action=AuditAction.SUBMIT,
            after_json=period_to_audit_dict(period),
        )

    await session.commit()
    logger.info("Request %s submitted for employee %s with %d period(s)", group_id, employee.id, len(periods))

    group = LeaveGroup(key=group_id, periods=sorted(periods, key=lambda p: p.start_date))
    await notify_stage_reviewers(group, WorkflowStep.MANAGER)
    return _build_group_response(group, _canton())


async def decide(
    session: AsyncSession,
    auth: AuthContext,
    period_id: uuid.UUID,
    payload: DecisionPayload,
) -> LeaveGroupResponse:
    """Record a reviewer decision for the request ``period_id`` belongs to.

    The whole group is locked, advanced in memory and flushed in one
    transaction: either every period moves or none does.
    """
    group = await _load_group(session, period_id, for_update=True)
    before = {p.id: period_to_audit_dict(p) for p in group}

    result = advance(
        group,
        payload.decision,
        payload.stage,
        auth.capabilities,
        actor_id=auth.user_id,
        signature=payload.signature,
        comment=payload.comment,
        now=datetime.now(UTC),
    )

    await session.flush()

    action = AuditAction.APPROVE if payload.decision == Decision.APPROVE else AuditAction.REJECT
    for period in group:
        record_period_change(
            session,
            actor_id=auth.user_id,
            period=period,
            action=action,
            before_json=before[period.id],
            after_json=period_to_audit_dict(period),
        )

    await session.commit()

    await get_workflow_events().dispatch(group, result)
    return _build_group_response(group, _canton())


async def withdraw(
    session: AsyncSession,
    auth: AuthContext,
    period_id: uuid.UUID,
    whole_group: bool = True,
) -> None:
    """Delete a request (or one of its periods) before any reviewer has acted.

    The applicant or a manager-stage reviewer can withdraw.
    """
    group = await _load_group(session, period_id, for_update=True)

    if auth.user_id != group.employee_id and StageCapability.REVIEW_MANAGER not in auth.capabilities:
        raise AppError("Not authorized to withdraw this request", status_code=403)

    ensure_withdrawable(group)

    targets = list(group) if whole_group else [p for p in group if p.id == period_id]
    for period in targets:
        record_period_change(
            session,
            actor_id=auth.user_id,
            period=period,
            action=AuditAction.DELETE,
            before_json=period_to_audit_dict(period),
        )
        await session.delete(period)

    await session.commit()
    logger.info("Request %s withdrawn (%d period(s))", group.key, len(targets))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_group(session: AsyncSession, period_id: uuid.UUID) -> LeaveGroupResponse:
    """Get the request a period belongs to."""
    group = await _load_group(session, period_id)
    return _build_group_response(group, _canton())


async def request_history(session: AsyncSession, period_id: uuid.UUID) -> RequestHistoryResponse:
    """Audit trail of the request ``period_id`` belongs to, withdrawn periods included."""
    period = await _get_period_or_404(session, period_id)
    entries = await list_group_entries(session, period.group_key)
    return RequestHistoryResponse(
        group_id=period.group_key,
        items=[
            AuditEntryResponse(
                id=entry.id,
                actor_id=entry.actor_id,
                period_id=entry.entity_id,
                action=entry.action,
                before_json=entry.before_json,
                after_json=entry.after_json,
                created_at=entry.created_at,
            )
            for entry in entries
        ],
        total=len(entries),
    )


async def list_leaves(
    session: AsyncSession,
    year: int | None = None,
    month: int | None = None,
    status_filter: LeaveStatus | None = None,
    employee_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 100,
) -> LeaveListResponse:
    """List periods, optionally restricted to those touching a month or year."""
    start = end = None
    if year is not None and month is not None:
        start, end = _month_bounds(year, month)
    elif year is not None:
        start, end = date(year, 1, 1), date(year, 12, 31)

    periods = await _fetch_periods(
        session,
        statuses=[status_filter] if status_filter is not None else None,
        start=start,
        end=end,
        employee_id=employee_id,
    )
    periods.sort(key=lambda p: p.start_date, reverse=True)

    canton = _canton()
    return LeaveListResponse(
        items=[_build_period_response(p, canton) for p in periods[offset : offset + limit]],
        total=len(periods),
    )


async def calendar_leaves(
    session: AsyncSession,
    start: date,
    end: date,
    status_filter: LeaveStatus | None = None,
) -> LeaveListResponse:
    """Periods overlapping ``[start, end]`` for the team calendar, of any status unless filtered."""
    ensure_date_range(start, end, label="calendar window")
    statuses = [status_filter] if status_filter is not None else None
    periods = await _fetch_periods(session, statuses=statuses, start=start, end=end)
    canton = _canton()
    return LeaveListResponse(items=[_build_period_response(p, canton) for p in periods], total=len(periods))


async def _pending_with_conflicts(session: AsyncSession) -> tuple[list[LeavePeriod], ConflictReport]:
    pending = await _fetch_periods(session, statuses=[LeaveStatus.PENDING])
    lookup = await build_employee_lookup(get_employee_directory())
    return pending, find_conflicts(pending, lookup)


async def list_pending_groups(
    session: AsyncSession,
    auth: AuthContext,
    step: WorkflowStep | None = None,
) -> LeaveGroupListResponse:
    """Requests still in review, each flagged with its staffing conflict if any."""
    if not auth.can_review:
        raise AppError("Not authorized to view pending requests", status_code=403)

    pending, conflicts = await _pending_with_conflicts(session)
    groups = group_periods(pending)
    if step is not None:
        groups = [g for g in groups if g.workflow_step == step]

    canton = _canton()
    return LeaveGroupListResponse(
        items=[_build_group_response(g, canton, conflicts) for g in groups],
        total=len(groups),
    )


async def detect_conflicts(session: AsyncSession) -> ConflictListResponse:
    """Pending periods overlapping another pending period of the same department and role."""
    pending, conflicts = await _pending_with_conflicts(session)
    items = [
        ConflictEntryResponse(
            period_id=p.id,
            department=conflicts.details[p.id].department,
            role=conflicts.details[p.id].role,
        )
        for p in pending
        if p.id in conflicts
    ]
    return ConflictListResponse(items=items, total=len(items))


# ---------------------------------------------------------------------------
# Capacity
# ---------------------------------------------------------------------------


async def simulate_capacity(session: AsyncSession, payload: SimulationPayload) -> SimulationResponse:
    """Weekly staffing of one department for a month, with what-if absences.

    Approved leave comes from the store; hypothetical absences come from the
    payload and, with ``seed_from_pending``, from the department's pending
    requests touching the month.
    """
    settings = get_settings()
    directory = get_employee_directory()
    employees = await directory.list_employees()
    lookup = {e.id: e for e in employees}.get

    headcount = headcount_by_department(employees).get(payload.department, 0)
    min_required = minimum_staff_for(payload.department, settings)
    weeks = week_ranges_for_month(payload.year, payload.month)

    hypothetical = [
        SimulatedAbsence(a.start_date, a.end_date, a.department) for a in payload.hypothetical_absences
    ]
    if payload.seed_from_pending:
        month_start, month_end = _month_bounds(payload.year, payload.month)
        pending = await _fetch_periods(session, statuses=[LeaveStatus.PENDING], start=month_start, end=month_end)
        hypothetical.extend(
            seed_hypothetical_absences(pending, payload.department, payload.year, payload.month, lookup)
        )

    approved = await _fetch_periods(
        session, statuses=[LeaveStatus.APPROVED], start=weeks[0].start, end=weeks[-1].end
    )
    capacities = simulate(weeks, payload.department, headcount, min_required, approved, hypothetical, lookup)
    alerts = capacity_alerts(payload.department, capacities)

    return SimulationResponse(
        department=payload.department,
        headcount=headcount,
        required_minimum=min_required,
        weeks=[
            WeekCapacityResponse(label=w.label, start=w.start, end=w.end, available=w.available, required=w.required)
            for w in capacities
        ],
        alerts=[
            CapacityAlertResponse(
                department=a.department,
                week_label=a.week_label,
                available_count=a.available_count,
                required_minimum=a.required_minimum,
            )
            for a in alerts
        ],
        hypothetical_absences=[
            SimulatedAbsenceInput(start_date=a.start_date, end_date=a.end_date, department=a.department)
            for a in hypothetical
        ],
    )


async def capacity_alerts_for_month(session: AsyncSession, year: int, month: int) -> CapacityAlertListResponse:
    """Weekly capacity alerts for every department, from approved leave only."""
    settings = get_settings()
    employees = await get_employee_directory().list_employees()
    lookup = {e.id: e for e in employees}.get
    weeks = week_ranges_for_month(year, month)
    approved = await _fetch_periods(session, statuses=[LeaveStatus.APPROVED], start=weeks[0].start, end=weeks[-1].end)

    items = []
    for department, headcount in sorted(headcount_by_department(employees).items()):
        capacities = simulate(
            weeks, department, headcount, minimum_staff_for(department, settings), approved, [], lookup
        )
        items.extend(
            CapacityAlertResponse(
                department=a.department,
                week_label=a.week_label,
                available_count=a.available_count,
                required_minimum=a.required_minimum,
            )
            for a in capacity_alerts(department, capacities)
        )
    return CapacityAlertListResponse(items=items, total=len(items))
