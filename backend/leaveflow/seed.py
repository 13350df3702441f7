"""Seed script for reference and development data.

Run with:  python -m leaveflow.seed

Creates the schema if needed, then inserts the leave types, the default
per-role accrual policies, a small reporting hierarchy and the company
holidays. Safe to run more than once.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import SQLModel, col

import leaveflow.models  # noqa: F401
from leaveflow.db import dispose_engine, get_engine, get_session_factory
from leaveflow.models.employee import Employee
from leaveflow.models.enums import EmployeeRole, LeaveTypeName
from leaveflow.models.holiday import CompanyHoliday
from leaveflow.models.leave_type import LeavePolicy, LeaveType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Leave type name -> carries forward across the year boundary
LEAVE_TYPES: dict[LeaveTypeName, bool] = {
    LeaveTypeName.SICK: False,
    LeaveTypeName.EARNED: True,
    LeaveTypeName.FLOATER: False,
    LeaveTypeName.LOSS_OF_PAY: False,
}

# Role -> (accrual per month, max days per year)
DEFAULT_POLICIES: dict[EmployeeRole, tuple[int, int]] = {
    EmployeeRole.SENIOR_MANAGER: (3, 36),
    EmployeeRole.MANAGER: (3, 30),
    EmployeeRole.EMPLOYEE: (3, 24),
    EmployeeRole.INTERN: (1, 12),
}

# Loss of pay is unpaid and never accrues.
ACCRUING_TYPES = (LeaveTypeName.SICK, LeaveTypeName.EARNED, LeaveTypeName.FLOATER)

# Well-known employee UUIDs
SENIOR_MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
INTERN_ID = uuid.UUID("00000000-0000-0000-0000-000000000004")

EMPLOYEES = [
    (SENIOR_MANAGER_ID, "Priya Raman", "Engineering", EmployeeRole.SENIOR_MANAGER, None),
    (MANAGER_ID, "Arjun Mehta", "Engineering", EmployeeRole.MANAGER, SENIOR_MANAGER_ID),
    (EMPLOYEE_ID, "Kavya Iyer", "Engineering", EmployeeRole.EMPLOYEE, MANAGER_ID),
    (INTERN_ID, "Rohan Das", "Engineering", EmployeeRole.INTERN, MANAGER_ID),
]

HOLIDAYS = [
    (date(2026, 1, 26), "Republic Day"),
    (date(2026, 5, 1), "Labour Day"),
    (date(2026, 8, 15), "Independence Day"),
    (date(2026, 10, 2), "Gandhi Jayanti"),
    (date(2026, 12, 25), "Christmas"),
]


async def seed_reference_data(session: AsyncSession) -> dict[LeaveTypeName, uuid.UUID]:
    """Insert missing leave types and policies. Returns leave type IDs by name."""
    result = await session.execute(select(LeaveType))
    existing = {lt.name: lt for lt in result.scalars().all()}

    type_ids: dict[LeaveTypeName, uuid.UUID] = {}
    for name, carry_forward in LEAVE_TYPES.items():
        leave_type = existing.get(name.value)
        if leave_type is None:
            leave_type = LeaveType(name=name.value, is_carry_forward=carry_forward)
            session.add(leave_type)
            logger.info("Created leave type %s", name.value)
        type_ids[name] = leave_type.id
    await session.flush()

    result = await session.execute(select(col(LeavePolicy.employee_role), col(LeavePolicy.leave_type_id)))
    existing_policies = {(role, leave_type_id) for role, leave_type_id in result.all()}

    for role, (per_month, cap) in DEFAULT_POLICIES.items():
        for name in ACCRUING_TYPES:
            if (role.value, type_ids[name]) in existing_policies:
                continue
            session.add(
                LeavePolicy(
                    employee_role=role.value,
                    leave_type_id=type_ids[name],
                    accrual_per_month=per_month,
                    max_days_per_year=cap,
                )
            )

    await session.commit()
    return type_ids


async def seed_employees(session: AsyncSession) -> None:
    """Insert the sample reporting chain, top-down so managers exist first."""
    for employee_id, name, department, role, manager_id in EMPLOYEES:
        if await session.get(Employee, employee_id) is not None:
            continue
        session.add(
            Employee(
                id=employee_id,
                name=name,
                department=department,
                role=role.value,
                manager_id=manager_id,
            )
        )
        await session.flush()
        logger.info("Created employee %s (%s)", name, role.value)
    await session.commit()


async def seed_holidays(session: AsyncSession) -> None:
    result = await session.execute(select(col(CompanyHoliday.date)))
    existing = set(result.scalars().all())
    for holiday_date, name in HOLIDAYS:
        if holiday_date not in existing:
            session.add(CompanyHoliday(date=holiday_date, name=name))
    await session.commit()


async def main() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with get_session_factory()() as session:
        await seed_reference_data(session)
        await seed_employees(session)
        await seed_holidays(session)

    await dispose_engine()
    logger.info("Seeding complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(main())
