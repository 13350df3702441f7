from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leaveflow.models.base import UUIDBase


class CompanyHoliday(UUIDBase, table=True):
    """A non-working company holiday that excludes days from leave deductions."""

    __tablename__ = "company_holiday"
    __table_args__ = (sa.UniqueConstraint("date", name="uq_holiday_date"),)

    date: datetime.date = Field(index=True)
    name: str = Field(max_length=255)
