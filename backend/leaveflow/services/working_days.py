from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, NamedTuple

from leaveflow.exceptions import ValidationError
from leaveflow.models.enums import LeaveTypeName

if TYPE_CHECKING:
    from collections.abc import Collection

_SATURDAY = 5


class WorkingDays(NamedTuple):
    """Result of a working-day count over an inclusive date range."""

    total_days: int
    all_invalid: bool


def is_weekend(day: date) -> bool:
    return day.weekday() >= _SATURDAY


def compute_working_days(
    from_date: date,
    to_date: date,
    holidays: Collection[date],
    leave_type_name: str,
    floater_dates: Collection[date] = (),
) -> WorkingDays:
    """Count working days in [from_date, to_date].

    A day counts when it is neither a weekend nor a holiday. Floater leave is
    meant to be taken on the company floater dates, so for that type those dates
    are not treated as holidays, and the count is always exactly one day.

    ``all_invalid`` is true when no day in the range counts.
    """
    if to_date < from_date:
        raise ValidationError("to_date must be on or after from_date")

    is_floater = leave_type_name == LeaveTypeName.FLOATER
    blocked = set(holidays)
    if is_floater:
        blocked.difference_update(floater_dates)

    total_days = 0
    current = from_date
    one_day = timedelta(days=1)

    while current <= to_date:
        if not is_weekend(current) and current not in blocked:
            total_days += 1
        current += one_day

    all_invalid = total_days == 0

    if is_floater:
        total_days = 1

    return WorkingDays(total_days=total_days, all_invalid=all_invalid)


def years_spanned(from_date: date, to_date: date) -> range:
    """Calendar years touched by the range, for fetching holiday calendars."""
    return range(from_date.year, to_date.year + 1)
