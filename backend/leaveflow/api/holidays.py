# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query

from leaveflow.db import SessionDep
from leaveflow.schemas.holiday import HolidayListResponse
from leaveflow.services import holiday as holiday_service

holidays_router = APIRouter(
    prefix="/holidays",
    tags=["holidays"],
)


@holidays_router.get("/floater", response_model=HolidayListResponse)
async def list_floater_holidays() -> HolidayListResponse:
    """Company floater dates, the only days floater leave may be taken on."""
    return holiday_service.list_floater_holidays()


@holidays_router.get("/public", response_model=HolidayListResponse)
async def list_public_holidays(
    session: SessionDep,
    year: int = Query(ge=1900, le=9999),
) -> HolidayListResponse:
    """Public holidays for a year from the configured holiday provider."""
    return await holiday_service.list_public_holidays(session, year)
