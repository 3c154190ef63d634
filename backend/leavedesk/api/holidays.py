# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from leavedesk.api.deps import AuthDep
from leavedesk.config import get_settings
from leavedesk.models.enums import CantonCode
from leavedesk.schemas.holiday import BusinessDaysResponse, HolidayListResponse, HolidayResponse
from leavedesk.services.duration import count_business_days
from leavedesk.services.holiday import holidays_for_year

holidays_router = APIRouter(prefix="/holidays", tags=["holidays"])


@holidays_router.get("", response_model=HolidayListResponse)
async def list_holidays(
    auth: AuthDep,
    year: int = Query(ge=1900, le=9999),
    canton: CantonCode | None = Query(default=None),
) -> HolidayListResponse:
    """Public holidays of a year for a canton (defaults to the configured canton)."""
    canton = canton or CantonCode(get_settings().default_canton)
    holidays = sorted(holidays_for_year(year, canton))
    return HolidayListResponse(
        year=year,
        canton=canton,
        items=[HolidayResponse(date=h.date, name=h.name) for h in holidays],
        total=len(holidays),
    )


@holidays_router.get("/business-days", response_model=BusinessDaysResponse)
async def business_days(
    auth: AuthDep,
    start: date = Query(),
    end: date = Query(),
    canton: CantonCode | None = Query(default=None),
) -> BusinessDaysResponse:
    """Working days between two dates, inclusive."""
    canton = canton or CantonCode(get_settings().default_canton)
    return BusinessDaysResponse(
        start_date=start,
        end_date=end,
        canton=canton,
        business_days=count_business_days(start, end, canton),
    )
