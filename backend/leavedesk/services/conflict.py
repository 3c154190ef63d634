# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from leavedesk.models.enums import LeaveStatus
from leavedesk.models.leave import LeavePeriod
from leavedesk.services.duration import intervals_overlap
from leavedesk.services.employee import EmployeeLookup

logger = logging.getLogger(__name__)


class ConflictDetail(NamedTuple):
    """The staffing bucket two overlapping requests compete in."""

    department: str
    role: str


@dataclass
class ConflictReport:
    """Pending periods that overlap another pending period of the same bucket."""

    ids: set[uuid.UUID] = field(default_factory=set)
    details: dict[uuid.UUID, ConflictDetail] = field(default_factory=dict)

    def __contains__(self, period_id: object) -> bool:
        return period_id in self.ids

    def __bool__(self) -> bool:
        return bool(self.ids)

    def mark(self, period: LeavePeriod, detail: ConflictDetail) -> None:
        self.ids.add(period.id)
        self.details[period.id] = detail


def find_conflicts(pending_periods: Iterable[LeavePeriod], lookup: EmployeeLookup) -> ConflictReport:
    """Flag pending periods whose dates overlap within a (department, role) bucket.

    Periods whose employee cannot be resolved, or lacks a department or role,
    are left out of the analysis. Each bucket is sorted by start date and
    swept; the inner loop stops at the first period starting after the
    current one ends.
    """
    buckets: dict[ConflictDetail, list[LeavePeriod]] = {}
    for period in pending_periods:
        if period.status != LeaveStatus.PENDING:
            continue
        employee = lookup(period.employee_id)
        if employee is None:
            logger.debug("Skipping period %s: employee %s not resolvable", period.id, period.employee_id)
            continue
        if not employee.department or not employee.role:
            continue
        buckets.setdefault(ConflictDetail(employee.department, employee.role), []).append(period)

    report = ConflictReport()
    for detail, bucket in buckets.items():
        if len(bucket) < 2:
            continue
        ordered = sorted(bucket, key=lambda p: p.start_date)
        for i, current in enumerate(ordered):
            for other in ordered[i + 1 :]:
                if other.start_date > current.end_date:
                    break
                if intervals_overlap(current.start_date, current.end_date, other.start_date, other.end_date):
                    report.mark(current, detail)
                    report.mark(other, detail)
    return report
