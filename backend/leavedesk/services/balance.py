# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leavedesk.models.enums import CantonCode, LeaveStatus, LeaveType
from leavedesk.models.leave import LeavePeriod
from leavedesk.schemas.balance import LeaveBalanceListResponse, LeaveBalanceResponse
from leavedesk.services.duration import count_business_days
from leavedesk.services.employee import EmployeeInfo, get_employee_directory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

_BASE_ENTITLEMENT_DAYS = 20
_SENIOR_ENTITLEMENT_DAYS = 25
_SENIOR_AGE = 50
_SENIOR_YEARS_OF_SERVICE = 20


def _years_since(start: date | None, reference: date) -> int:
    if start is None:
        return 0
    years = reference.year - start.year
    if (reference.month, reference.day) < (start.month, start.day):
        years -= 1
    return years


def annual_entitlement(employee: EmployeeInfo, year: int) -> float:
    """Paid leave days an employee is entitled to in ``year``.

    25 days from age 50 or after 20 years of service (both assessed on
    31 December), 20 otherwise. Prorated by remaining months in the hiring
    year, and zero for a year before the employee started.
    """
    year_end = date(year, 12, 31)
    days = _BASE_ENTITLEMENT_DAYS
    if (
        _years_since(employee.birth_date, year_end) >= _SENIOR_AGE
        or _years_since(employee.start_date, year_end) >= _SENIOR_YEARS_OF_SERVICE
    ):
        days = _SENIOR_ENTITLEMENT_DAYS

    if employee.start_date is not None:
        if employee.start_date.year > year:
            return 0
        if employee.start_date.year == year:
            months_remaining = 13 - employee.start_date.month
            return round(days * months_remaining / 12, 2)
    return days


def vacation_days_used(
    periods: Iterable[LeavePeriod],
    year: int,
    canton: CantonCode | str = CantonCode.VD,
) -> dict[uuid.UUID, int]:
    """Business days of approved vacation per employee, clipped to ``year``."""
    year_start = date(year, 1, 1)
    year_end = date(year, 12, 31)
    usage: dict[uuid.UUID, int] = {}
    for period in periods:
        if period.status != LeaveStatus.APPROVED or period.type != LeaveType.VACATION:
            continue
        start = max(period.start_date, year_start)
        end = min(period.end_date, year_end)
        if end < start:
            continue
        days = count_business_days(start, end, canton)
        if days:
            usage[period.employee_id] = usage.get(period.employee_id, 0) + days
    return usage


async def list_balances(
    session: AsyncSession,
    year: int,
    canton: CantonCode | str = CantonCode.VD,
) -> LeaveBalanceListResponse:
    """Entitlement and vacation usage for every employee of the directory."""
    result = await session.execute(
        select(LeavePeriod).where(
            col(LeavePeriod.status) == LeaveStatus.APPROVED.value,
            col(LeavePeriod.type) == LeaveType.VACATION.value,
            col(LeavePeriod.end_date) >= date(year, 1, 1),
            col(LeavePeriod.start_date) <= date(year, 12, 31),
        )
    )
    usage = vacation_days_used(result.scalars().all(), year, canton)

    employees = await get_employee_directory().list_employees()
    employees.sort(key=lambda e: (e.last_name, e.first_name))

    items = []
    for employee in employees:
        total = annual_entitlement(employee, year)
        used = usage.get(employee.id, 0)
        items.append(
            LeaveBalanceResponse(
                employee_id=employee.id,
                employee_name=employee.full_name,
                year=year,
                paid_leave_total=total,
                paid_leave_used=used,
                paid_leave_remaining=round(total - used, 2),
            )
        )
    return LeaveBalanceListResponse(items=items, total=len(items))
