# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class SimulatedAbsenceInput(BaseModel):
    """A what-if absence for a capacity simulation."""

    start_date: date
    end_date: date
    department: str | None = None


class SimulationPayload(BaseModel):
    """Request body for a weekly capacity simulation of one department and month."""

    year: int = Field(ge=1900, le=9999)
    month: int = Field(ge=1, le=12)
    department: str = Field(min_length=1)
    hypothetical_absences: list[SimulatedAbsenceInput] = Field(default_factory=list)
    seed_from_pending: bool = False


class WeekCapacityResponse(BaseModel):
    """Staff available in one week."""

    label: str
    start: date
    end: date
    available: int
    required: int


class CapacityAlertResponse(BaseModel):
    """A week where a department falls below its minimum staffing."""

    department: str
    week_label: str
    available_count: int
    required_minimum: int


class SimulationResponse(BaseModel):
    """Weekly capacity of a department and the weeks that raise an alert."""

    department: str
    headcount: int
    required_minimum: int
    weeks: list[WeekCapacityResponse]
    alerts: list[CapacityAlertResponse]
    hypothetical_absences: list[SimulatedAbsenceInput]


class CapacityAlertListResponse(BaseModel):
    """Capacity alerts across departments."""

    items: list[CapacityAlertResponse]
    total: int
