"""Tests for the weekly capacity simulator."""

from __future__ import annotations

import uuid
from datetime import date

import pytest
from conftest import make_employee, make_period

from leavedesk.config import Settings
from leavedesk.exceptions import InvalidDateRange
from leavedesk.models.enums import LeaveStatus
from leavedesk.services.capacity import (
    SimulatedAbsence,
    WeekRange,
    capacity_alerts,
    minimum_staff_for,
    seed_hypothetical_absences,
    simulate,
    week_ranges_for_month,
)

SORTING = "Sorting"
TARGET_WEEK = WeekRange(start=date(2024, 7, 8), end=date(2024, 7, 14), label="W28 (08.07 - 14.07)", iso_week=28)


def _lookup(*employees):
    by_id = {e.id: e for e in employees}
    return by_id.get


# ---------------------------------------------------------------------------
# Week ranges
# ---------------------------------------------------------------------------


def test_weeks_of_july_2024() -> None:
    weeks = week_ranges_for_month(2024, 7)

    assert len(weeks) == 5
    assert weeks[0].start == date(2024, 7, 1)
    assert weeks[0].label == "W27 (01.07 - 07.07)"
    assert weeks[-1].end == date(2024, 8, 4)
    assert weeks[-1].label == "W31 (29.07 - 04.08)"
    assert all(w.start.weekday() == 0 and w.end.weekday() == 6 for w in weeks)


def test_weeks_spill_into_previous_month() -> None:
    # 2024-05-01 is a Wednesday.
    weeks = week_ranges_for_month(2024, 5)
    assert weeks[0].start == date(2024, 4, 29)
    assert weeks[-1].end == date(2024, 6, 2)


def test_weeks_across_year_end_use_iso_numbers() -> None:
    weeks = week_ranges_for_month(2024, 12)
    assert weeks[-1].start == date(2024, 12, 30)
    assert weeks[-1].iso_week == 1
    assert weeks[-1].label == "W01 (30.12 - 05.01)"


def test_last_week_of_the_calendar_stops_at_the_last_date() -> None:
    # 9999-12-31 is a Friday.
    weeks = week_ranges_for_month(9999, 12)
    assert weeks[-1].start == date(9999, 12, 27)
    assert weeks[-1].end == date.max
    assert weeks[-1].label.endswith("(27.12 - 31.12)")



# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------


def test_one_approved_and_one_hypothetical_absence() -> None:
    employee = make_employee(SORTING)
    approved = make_period(
        date(2024, 7, 9), date(2024, 7, 10), employee_id=employee.id, status=LeaveStatus.APPROVED
    )
    hypothetical = SimulatedAbsence(date(2024, 7, 11), date(2024, 7, 12), SORTING)

    capacities = simulate([TARGET_WEEK], SORTING, 10, 3, [approved], [hypothetical], _lookup(employee))

    assert capacities[0].available == 8
    assert capacities[0].required == 3
    assert capacity_alerts(SORTING, capacities) == []


def test_eight_absences_raise_an_alert() -> None:
    employees = [make_employee(SORTING) for _ in range(4)]
    approved = [
        make_period(date(2024, 7, 8), date(2024, 7, 12), employee_id=e.id, status=LeaveStatus.APPROVED)
        for e in employees
    ]
    hypothetical = [SimulatedAbsence(date(2024, 7, 8), date(2024, 7, 12), SORTING) for _ in range(4)]

    capacities = simulate([TARGET_WEEK], SORTING, 10, 3, approved, hypothetical, _lookup(*employees))
    alerts = capacity_alerts(SORTING, capacities)

    assert capacities[0].available == 2
    assert len(alerts) == 1
    assert alerts[0].department == SORTING
    assert alerts[0].week_label == TARGET_WEEK.label
    assert alerts[0].available_count == 2
    assert alerts[0].required_minimum == 3


def test_available_may_go_negative() -> None:
    hypothetical = [SimulatedAbsence(date(2024, 7, 8), date(2024, 7, 8)) for _ in range(5)]

    capacities = simulate([TARGET_WEEK], SORTING, 2, 4, [], hypothetical, _lookup())

    assert capacities[0].available == -3
    assert capacities[0].required == 4


def test_employee_with_two_approved_periods_counts_once() -> None:
    employee = make_employee(SORTING)
    approved = [
        make_period(date(2024, 7, 8), date(2024, 7, 9), employee_id=employee.id, status=LeaveStatus.APPROVED),
        make_period(date(2024, 7, 11), date(2024, 7, 12), employee_id=employee.id, status=LeaveStatus.APPROVED),
    ]

    capacities = simulate([TARGET_WEEK], SORTING, 5, 2, approved, [], _lookup(employee))

    assert capacities[0].available == 4


def test_employee_with_two_pending_ranges_in_one_week_counts_once() -> None:
    employee = make_employee(SORTING)
    group_id = uuid.uuid4()
    pending = [
        make_period(date(2024, 7, 1), date(2024, 7, 2), employee_id=employee.id, group_id=group_id),
        make_period(date(2024, 7, 4), date(2024, 7, 4), employee_id=employee.id, group_id=group_id),
    ]
    seeded = seed_hypothetical_absences(pending, SORTING, 2024, 7, _lookup(employee))
    week = week_ranges_for_month(2024, 7)[0]

    capacities = simulate([week], SORTING, 10, 2, [], seeded, _lookup(employee))

    assert week.iso_week == 27
    assert capacities[0].available == 9


def test_seeded_absence_of_employee_already_on_approved_leave_is_not_counted_twice() -> None:
    employee = make_employee(SORTING)
    approved = [
        make_period(date(2024, 7, 8), date(2024, 7, 9), employee_id=employee.id, status=LeaveStatus.APPROVED),
    ]
    hypothetical = [SimulatedAbsence(date(2024, 7, 11), date(2024, 7, 12), SORTING, employee.id)]

    capacities = simulate([TARGET_WEEK], SORTING, 5, 2, approved, hypothetical, _lookup(employee))

    assert capacities[0].available == 4


def test_anonymous_hypothetical_absences_each_count() -> None:
    hypothetical = [SimulatedAbsence(date(2024, 7, 8), date(2024, 7, 9), SORTING) for _ in range(2)]

    capacities = simulate([TARGET_WEEK], SORTING, 5, 2, [], hypothetical, _lookup())

    assert capacities[0].available == 3



def test_other_departments_and_pending_periods_are_ignored() -> None:
    logistics = make_employee("Logistics")
    sorter = make_employee(SORTING)
    approved = [
        make_period(date(2024, 7, 8), date(2024, 7, 9), employee_id=logistics.id, status=LeaveStatus.APPROVED),
        make_period(date(2024, 7, 8), date(2024, 7, 9), employee_id=sorter.id),
    ]
    hypothetical = [SimulatedAbsence(date(2024, 7, 8), date(2024, 7, 8), "Logistics")]

    capacities = simulate([TARGET_WEEK], SORTING, 5, 2, approved, hypothetical, _lookup(logistics, sorter))

    assert capacities[0].available == 5


def test_absence_outside_the_week_is_ignored() -> None:
    hypothetical = [SimulatedAbsence(date(2024, 7, 15), date(2024, 7, 19), SORTING)]

    capacities = simulate([TARGET_WEEK], SORTING, 5, 2, [], hypothetical, _lookup())

    assert capacities[0].available == 5


def test_required_is_the_configured_minimum_each_week() -> None:
    weeks = week_ranges_for_month(2024, 7)
    hypothetical = [SimulatedAbsence(date(2024, 7, 1), date(2024, 7, 31), SORTING) for _ in range(3)]

    capacities = simulate(weeks, SORTING, 4, 2, [], hypothetical, _lookup())

    assert [c.required for c in capacities] == [2] * len(weeks)
    assert [c.label for c in capacities] == [w.label for w in weeks]
    assert len(capacity_alerts(SORTING, capacities)) == len(weeks)


def test_inverted_hypothetical_absence_is_rejected() -> None:
    with pytest.raises(InvalidDateRange):
        SimulatedAbsence(date(2024, 7, 12), date(2024, 7, 8))


# ---------------------------------------------------------------------------
# Configuration and seeding
# ---------------------------------------------------------------------------


def test_minimum_staff_falls_back_to_default() -> None:
    settings = Settings(min_staff_default=2, min_staff_by_department={SORTING: 6})

    assert minimum_staff_for(SORTING, settings) == 6
    assert minimum_staff_for("Logistics", settings) == 2


def test_pending_requests_seed_hypothetical_absences() -> None:
    sorter = make_employee(SORTING)
    driver = make_employee("Logistics")
    in_month = make_period(date(2024, 6, 28), date(2024, 7, 2), employee_id=sorter.id)
    next_month = make_period(date(2024, 8, 5), date(2024, 8, 6), employee_id=sorter.id)
    approved = make_period(date(2024, 7, 8), date(2024, 7, 9), employee_id=sorter.id, status=LeaveStatus.APPROVED)
    other_department = make_period(date(2024, 7, 8), date(2024, 7, 9), employee_id=driver.id)

    seeded = seed_hypothetical_absences(
        [in_month, next_month, approved, other_department], SORTING, 2024, 7, _lookup(sorter, driver)
    )

    assert seeded == [SimulatedAbsence(date(2024, 6, 28), date(2024, 7, 2), SORTING, sorter.id)]
