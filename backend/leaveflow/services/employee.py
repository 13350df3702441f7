# ruff: noqa: TC003
"""Read-only view of the employee directory.

The engine never walks the hierarchy recursively: approval needs at most two
levels, so the manager and the manager's manager are fetched in one query.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import aliased
from sqlmodel import col

from leaveflow.exceptions import NotFoundError
from leaveflow.models.employee import Employee
from leaveflow.models.enums import EmployeeRole

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class EmployeeHierarchy(BaseModel):
    """An employee together with the two approval levels above them."""

    id: uuid.UUID
    name: str
    role: EmployeeRole
    manager_id: uuid.UUID | None = None
    manager_of_manager_id: uuid.UUID | None = None


async def get_employee_hierarchy(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeHierarchy | None:
    """Fetch an employee, their manager and their manager's manager. Returns None if not found."""
    manager = aliased(Employee)

    result = await session.execute(
        select(  # ty: ignore[no-matching-overload]
            Employee.id,
            Employee.name,
            Employee.role,
            Employee.manager_id,
            manager.manager_id.label("manager_of_manager_id"),  # type: ignore[union-attr]
        )
        .outerjoin(manager, col(Employee.manager_id) == manager.id)
        .where(col(Employee.id) == employee_id)
    )
    row = result.one_or_none()
    if row is None:
        return None

    return EmployeeHierarchy(
        id=row.id,
        name=row.name,
        role=EmployeeRole(row.role),
        manager_id=row.manager_id,
        manager_of_manager_id=row.manager_of_manager_id,
    )


async def get_employee_hierarchy_or_404(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeHierarchy:
    hierarchy = await get_employee_hierarchy(session, employee_id)
    if hierarchy is None:
        raise NotFoundError("Employee not found")
    return hierarchy


async def get_employee_or_404(session: AsyncSession, employee_id: uuid.UUID) -> Employee:
    result = await session.execute(select(Employee).where(col(Employee.id) == employee_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def lock_employee(session: AsyncSession, employee_id: uuid.UUID) -> Employee:
    """Fetch the employee row with a FOR UPDATE lock.

    Every balance-affecting transaction takes this lock before touching the
    employee's balance rows, so the cached total and the rows it derives from
    are always written under the same lock order.
    """
    result = await session.execute(
        select(Employee)
        .where(col(Employee.id) == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def list_employee_roles(session: AsyncSession) -> list[tuple[uuid.UUID, EmployeeRole]]:
    """All employees as plain (id, role) pairs, safe to use across commits and rollbacks."""
    result = await session.execute(
        select(col(Employee.id), col(Employee.role)).order_by(col(Employee.id))  # ty: ignore[no-matching-overload]
    )
    return [(row[0], EmployeeRole(row[1])) for row in result.all()]
