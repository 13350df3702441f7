"""Holiday providers and the holiday endpoints."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from leaveflow.exceptions import InternalError
from leaveflow.models.balance import LeaveBalance
from leaveflow.models.enums import LeaveTypeName
from leaveflow.models.holiday import CompanyHoliday
from leaveflow.services.holiday import (
    CalendarificHolidayProvider,
    DatabaseHolidayProvider,
    HolidayProvider,
    set_holiday_provider,
)

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from conftest import Org

CALENDARIFIC_PAYLOAD: dict[str, Any] = {
    "meta": {"code": 200},
    "response": {
        "holidays": [
            {"name": "Republic Day", "date": {"iso": "2026-01-26"}},
            {"name": "Holi", "date": {"iso": "2026-03-04"}},
            {"name": "Independence Day", "date": {"iso": "2026-08-15T00:00:00+05:30"}},
            {"name": "Independence Day (observed)", "date": {"iso": "2026-08-15"}},
        ]
    },
}


def _calendarific(calls: list[httpx.Request], status_code: int = 200) -> CalendarificHolidayProvider:
    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code, json=CALENDARIFIC_PAYLOAD if status_code == 200 else {})

    return CalendarificHolidayProvider(
        api_key="test-key",
        country="IN",
        base_url="https://calendarific.test/api/v2",
        transport=httpx.MockTransport(_handler),
    )


async def _seed_holidays(session: AsyncSession) -> None:
    session.add_all(
        [
            CompanyHoliday(date=date(2026, 1, 26), name="Republic Day"),
            CompanyHoliday(date=date(2026, 10, 2), name="Gandhi Jayanti"),
            CompanyHoliday(date=date(2027, 1, 26), name="Republic Day"),
        ]
    )
    await session.commit()


# ---------------------------------------------------------------------------
# Database provider
# ---------------------------------------------------------------------------


async def test_database_provider_between(db_session: AsyncSession) -> None:
    await _seed_holidays(db_session)
    provider = DatabaseHolidayProvider()
    assert isinstance(provider, HolidayProvider)

    found = await provider.holidays_between(db_session, date(2026, 1, 1), date(2026, 12, 31))
    assert found == {date(2026, 1, 26), date(2026, 10, 2)}


async def test_public_holidays_endpoint(async_client: AsyncClient, db_session: AsyncSession) -> None:
    await _seed_holidays(db_session)

    resp = await async_client.get("/holidays/public", params={"year": 2026})
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [item["date"] for item in data["items"]] == ["2026-01-26", "2026-10-02"]


async def test_public_holidays_requires_year(async_client: AsyncClient) -> None:
    resp = await async_client.get("/holidays/public")
    assert resp.status_code == 422


async def test_floater_holidays_endpoint(async_client: AsyncClient) -> None:
    resp = await async_client.get("/holidays/floater")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 5
    dates = [item["date"] for item in data["items"]]
    assert dates == sorted(dates)
    assert "2026-01-14" in dates


# ---------------------------------------------------------------------------
# Calendarific provider
# ---------------------------------------------------------------------------


async def test_calendarific_lists_year(db_session: AsyncSession) -> None:
    calls: list[httpx.Request] = []
    provider = _calendarific(calls)

    holidays = await provider.list_holidays(db_session, 2026)

    assert [(h.date, h.name) for h in holidays] == [
        (date(2026, 1, 26), "Republic Day"),
        (date(2026, 3, 4), "Holi"),
        (date(2026, 8, 15), "Independence Day"),
    ]
    assert calls[0].url.params["country"] == "IN"
    assert calls[0].url.params["year"] == "2026"
    assert calls[0].url.path == "/api/v2/holidays"


async def test_calendarific_caches_per_year(db_session: AsyncSession) -> None:
    calls: list[httpx.Request] = []
    provider = _calendarific(calls)

    await provider.holidays_between(db_session, date(2026, 1, 1), date(2026, 1, 31))
    found = await provider.holidays_between(db_session, date(2026, 3, 1), date(2026, 3, 31))

    assert found == {date(2026, 3, 4)}
    assert len(calls) == 1


async def test_calendarific_failure_raises(db_session: AsyncSession) -> None:
    provider = _calendarific([], status_code=500)
    with pytest.raises(InternalError) as exc_info:
        await provider.holidays_between(db_session, date(2026, 1, 1), date(2026, 1, 31))
    assert exc_info.value.status_code == 502


async def test_submission_uses_configured_provider(
    async_client: AsyncClient, db_session: AsyncSession, org: Org
) -> None:
    earned = org.types[LeaveTypeName.EARNED]
    db_session.add(LeaveBalance(employee_id=org.employee.id, leave_type_id=earned.id, balance=10))
    await db_session.commit()
    set_holiday_provider(_calendarific([]))

    # Mon 26 Jan .. Fri 30 Jan with Republic Day off
    resp = await async_client.post(
        "/leave-requests",
        json={
            "employee_id": str(org.employee.id),
            "leave_type_id": str(earned.id),
            "from_date": "2026-01-26",
            "to_date": "2026-01-30",
            "reason": "Trip",
        },
        headers={"X-Employee-Id": str(org.employee.id), "X-Role": "EMPLOYEE"},
    )
    assert resp.status_code == 201
    assert resp.json()["request"]["num_of_days"] == 4


async def test_submission_fails_when_calendar_unavailable(async_client: AsyncClient, org: Org) -> None:
    set_holiday_provider(_calendarific([], status_code=503))

    resp = await async_client.post(
        "/leave-requests",
        json={
            "employee_id": str(org.employee.id),
            "leave_type_id": str(org.types[LeaveTypeName.EARNED].id),
            "from_date": "2026-01-26",
            "to_date": "2026-01-30",
            "reason": "Trip",
        },
        headers={"X-Employee-Id": str(org.employee.id), "X-Role": "EMPLOYEE"},
    )
    assert resp.status_code == 502
    assert resp.json()["error"] == "InternalError"
