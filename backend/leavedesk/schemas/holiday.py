# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from leavedesk.models.enums import CantonCode


class HolidayResponse(BaseModel):
    """Response schema for a public holiday."""

    date: date
    name: str


class HolidayListResponse(BaseModel):
    """Public holidays of one year and canton."""

    year: int
    canton: CantonCode
    items: list[HolidayResponse]
    total: int


class BusinessDaysResponse(BaseModel):
    """Working days between two dates, inclusive."""

    start_date: date
    end_date: date
    canton: CantonCode
    business_days: int
