"""Holiday calendar collaborator.

The engine only needs the set of non-working dates in a range. Two providers
are available: the company holiday table, and the Calendarific public-holiday
API for the configured country. The active provider is chosen by settings and
can be swapped for tests.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx
from sqlalchemy import select
from sqlmodel import col

from leaveflow.config import get_settings
from leaveflow.exceptions import InternalError
from leaveflow.models.holiday import CompanyHoliday
from leaveflow.schemas.holiday import HolidayListResponse, HolidayResponse
from leaveflow.services.working_days import years_spanned

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@runtime_checkable
class HolidayProvider(Protocol):
    """Interface for the holiday calendar."""

    async def list_holidays(self, session: AsyncSession, year: int) -> list[HolidayResponse]:
        """All holidays of a calendar year, ordered by date."""
        ...

    async def holidays_between(self, session: AsyncSession, start: date, end: date) -> set[date]:
        """Holiday dates within [start, end]."""
        ...


class DatabaseHolidayProvider:
    """Reads the company holiday table."""

    async def list_holidays(self, session: AsyncSession, year: int) -> list[HolidayResponse]:
        result = await session.execute(
            select(CompanyHoliday)
            .where(
                col(CompanyHoliday.date) >= date(year, 1, 1),
                col(CompanyHoliday.date) <= date(year, 12, 31),
            )
            .order_by(col(CompanyHoliday.date))
        )
        return [HolidayResponse(date=h.date, name=h.name) for h in result.scalars().all()]

    async def holidays_between(self, session: AsyncSession, start: date, end: date) -> set[date]:
        result = await session.execute(
            select(col(CompanyHoliday.date)).where(
                col(CompanyHoliday.date) >= start,
                col(CompanyHoliday.date) <= end,
            )
        )
        return {row[0] for row in result.all()}


class CalendarificHolidayProvider:
    """Fetches public holidays for a country from the Calendarific API.

    Years are cached for the life of the provider; holiday calendars do not
    change once published.
    """

    def __init__(
        self,
        api_key: str,
        country: str,
        base_url: str = "https://calendarific.com/api/v2",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._country = country
        self._base_url = base_url
        self._transport = transport
        self._cache: dict[int, list[HolidayResponse]] = {}

    async def _fetch_year(self, year: int) -> list[HolidayResponse]:
        if year in self._cache:
            return self._cache[year]

        params = {"api_key": self._api_key, "country": self._country, "year": str(year)}
        try:
            async with httpx.AsyncClient(base_url=self._base_url, transport=self._transport, timeout=10.0) as client:
                response = await client.get("/holidays", params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            logger.exception("Holiday calendar request failed for %s/%s", self._country, year)
            raise InternalError("Holiday calendar is unavailable", status_code=502) from exc

        raw = (payload.get("response") or {}).get("holidays") or []
        by_date: dict[date, str] = {}
        for item in raw:
            iso = item["date"]["iso"]
            by_date.setdefault(date.fromisoformat(iso[:10]), item["name"])

        holidays = [HolidayResponse(date=d, name=name) for d, name in sorted(by_date.items())]
        self._cache[year] = holidays
        logger.info("Fetched %d holidays for %s/%s", len(holidays), self._country, year)
        return holidays

    async def list_holidays(self, session: AsyncSession, year: int) -> list[HolidayResponse]:
        return await self._fetch_year(year)

    async def holidays_between(self, session: AsyncSession, start: date, end: date) -> set[date]:
        found: set[date] = set()
        for year in years_spanned(start, end):
            found.update(h.date for h in await self._fetch_year(year) if start <= h.date <= end)
        return found


def _build_default_provider() -> HolidayProvider:
    settings = get_settings()
    if settings.holiday_provider == "calendarific":
        if not settings.calendarific_api_key:
            msg = "CALENDARIFIC_API_KEY must be set when HOLIDAY_PROVIDER=calendarific"
            raise RuntimeError(msg)
        return CalendarificHolidayProvider(
            api_key=settings.calendarific_api_key,
            country=settings.holiday_country,
            base_url=settings.calendarific_base_url,
        )
    return DatabaseHolidayProvider()


_holiday_provider: HolidayProvider | None = None


def get_holiday_provider() -> HolidayProvider:
    """Return the configured holiday provider."""
    global _holiday_provider
    if _holiday_provider is None:
        _holiday_provider = _build_default_provider()
    return _holiday_provider


def set_holiday_provider(provider: HolidayProvider | None) -> None:
    """Override the provider (for testing or production wiring); ``None`` restores the default."""
    global _holiday_provider
    _holiday_provider = provider


# ---------------------------------------------------------------------------
# Read surface
# ---------------------------------------------------------------------------


def list_floater_holidays() -> HolidayListResponse:
    """The company floater dates, the only days floater leave may be taken."""
    floaters = get_settings().floater_holidays
    items = [HolidayResponse(date=d, name=name) for d, name in sorted(floaters.items())]
    return HolidayListResponse(items=items, total=len(items))


async def list_public_holidays(session: AsyncSession, year: int) -> HolidayListResponse:
    items = await get_holiday_provider().list_holidays(session, year)
    return HolidayListResponse(items=items, total=len(items))
