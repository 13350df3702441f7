from __future__ import annotations

import datetime

from pydantic import BaseModel


class HolidayResponse(BaseModel):
    """A named calendar date."""

    date: datetime.date
    name: str


class HolidayListResponse(BaseModel):
    """Holidays ordered by date."""

    items: list[HolidayResponse]
    total: int
