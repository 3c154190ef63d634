# ruff: noqa: TC003
from __future__ import annotations

import calendar
import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from leavedesk.config import Settings
from leavedesk.models.enums import LeaveStatus
from leavedesk.models.leave import LeavePeriod
from leavedesk.services.duration import ensure_date_range, intervals_overlap
from leavedesk.services.employee import EmployeeLookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekRange:
    """A Monday-to-Sunday week of the simulation window."""

    start: date
    end: date
    label: str
    iso_week: int


@dataclass(frozen=True)
class SimulatedAbsence:
    """A what-if absence supplied for one simulation run.

    Absences seeded from pending requests carry the employee they belong to,
    so several ranges of the same person count once per week.
    """

    start_date: date
    end_date: date
    department: str | None = None
    employee_id: uuid.UUID | None = None

    def __post_init__(self) -> None:
        ensure_date_range(self.start_date, self.end_date, label="simulated absence")


@dataclass(frozen=True)
class WeekCapacity:
    """Staff left in a department for one week."""

    label: str
    start: date
    end: date
    available: int
    required: int


@dataclass(frozen=True)
class CapacityAlert:
    """A week where a department falls below its minimum staffing."""

    department: str
    week_label: str
    available_count: int
    required_minimum: int


def week_ranges_for_month(year: int, month: int) -> list[WeekRange]:
    """Calendar weeks covering ``month``.

    Starts on the Monday of the week holding the 1st and ends on the Sunday
    of the week holding the last day, so the first and last weeks may spill
    into the neighbouring months. A week running past ``date.max`` is cut
    short there.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    cursor = first - timedelta(days=first.weekday())

    weeks = []
    while True:
        week_end = cursor + timedelta(days=min(6, (date.max - cursor).days))
        iso_week = cursor.isocalendar().week
        label = f"W{iso_week:02d} ({cursor:%d.%m} - {week_end:%d.%m})"
        weeks.append(WeekRange(start=cursor, end=week_end, label=label, iso_week=iso_week))
        if week_end >= last:
            return weeks
        cursor = week_end + timedelta(days=1)


def minimum_staff_for(department: str, settings: Settings) -> int:
    """Configured minimum headcount for ``department``, or the default."""
    return settings.min_staff_by_department.get(department, settings.min_staff_default)


def _approved_absentees(
    week: WeekRange,
    department: str,
    approved_absences: Sequence[LeavePeriod],
    lookup: EmployeeLookup,
) -> set[uuid.UUID]:
    absent: set[uuid.UUID] = set()
    for period in approved_absences:
        if period.status != LeaveStatus.APPROVED:
            continue
        if not intervals_overlap(period.start_date, period.end_date, week.start, week.end):
            continue
        employee = lookup(period.employee_id)
        if employee is None:
            logger.debug("Skipping period %s: employee %s not resolvable", period.id, period.employee_id)
            continue
        if employee.department == department:
            absent.add(period.employee_id)
    return absent


def simulate(
    weeks: Sequence[WeekRange],
    department: str,
    headcount: int,
    min_required: int,
    approved_absences: Sequence[LeavePeriod],
    hypothetical_absences: Sequence[SimulatedAbsence],
    lookup: EmployeeLookup,
) -> list[WeekCapacity]:
    """Compute the staff available to ``department`` in each week.

    ``available`` is headcount minus the distinct employees of the department
    on approved leave that week, minus the hypothetical absences overlapping
    the week. Hypothetical absences tied to an employee count once per
    employee, and not at all when that employee is already away on approved
    leave. It is never clamped: a negative value is a staffing deficit.
    """
    result = []
    for week in weeks:
        approved = _approved_absentees(week, department, approved_absences, lookup)
        named: set[uuid.UUID] = set()
        anonymous = 0
        for absence in hypothetical_absences:
            if absence.department is not None and absence.department != department:
                continue
            if not intervals_overlap(absence.start_date, absence.end_date, week.start, week.end):
                continue
            if absence.employee_id is None:
                anonymous += 1
            elif absence.employee_id not in approved:
                named.add(absence.employee_id)
        result.append(
            WeekCapacity(
                label=week.label,
                start=week.start,
                end=week.end,
                available=headcount - len(approved) - len(named) - anonymous,
                required=min_required,
            )
        )
    return result


def capacity_alerts(department: str, capacities: Iterable[WeekCapacity]) -> list[CapacityAlert]:
    """Weeks where the department drops below its required minimum."""
    return [
        CapacityAlert(
            department=department,
            week_label=week.label,
            available_count=week.available,
            required_minimum=week.required,
        )
        for week in capacities
        if week.available < week.required
    ]


def seed_hypothetical_absences(
    pending_periods: Iterable[LeavePeriod],
    department: str,
    year: int,
    month: int,
    lookup: EmployeeLookup,
) -> list[SimulatedAbsence]:
    """Turn the department's pending requests touching ``month`` into what-if absences."""
    month_start = date(year, month, 1)
    month_end = date(year, month, calendar.monthrange(year, month)[1])

    seeded = []
    for period in pending_periods:
        if period.status != LeaveStatus.PENDING:
            continue
        if not intervals_overlap(period.start_date, period.end_date, month_start, month_end):
            continue
        employee = lookup(period.employee_id)
        if employee is None or employee.department != department:
            continue
        seeded.append(SimulatedAbsence(period.start_date, period.end_date, department, period.employee_id))
    return seeded
