from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leaveflow.db import build_engine, get_session
from leaveflow.main import app
from leaveflow.models import SQLModel
from leaveflow.models.employee import Employee
from leaveflow.models.enums import EmployeeRole, LeaveTypeName
from leaveflow.models.leave_type import LeaveType
from leaveflow.services.holiday import DatabaseHolidayProvider, set_holiday_provider

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A fresh in-memory SQLite database per test."""
    _engine = build_engine("sqlite+aiosqlite://")
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _database_holidays() -> Iterator[None]:
    """Every test reads holidays from the company holiday table unless it swaps the provider."""
    set_holiday_provider(DatabaseHolidayProvider())
    yield
    set_holiday_provider(None)


# ---------------------------------------------------------------------------
# Org fixture
# ---------------------------------------------------------------------------


@dataclass
class Org:
    """senior <- manager <- employee, and manager <- intern.

    ``lone`` reports to nobody; ``orphan_report`` reports to ``orphan_manager``,
    who has no manager of their own.
    """

    senior: Employee
    manager: Employee
    employee: Employee
    intern: Employee
    lone: Employee
    orphan_manager: Employee
    orphan_report: Employee
    types: dict[LeaveTypeName, LeaveType] = field(default_factory=dict)


async def _create_employee(
    session: AsyncSession,
    name: str,
    role: EmployeeRole = EmployeeRole.EMPLOYEE,
    manager: Employee | None = None,
) -> Employee:
    employee = Employee(
        name=name,
        department="Engineering",
        role=role.value,
        manager_id=manager.id if manager is not None else None,
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest.fixture
async def org(db_session: AsyncSession) -> Org:
    types = {
        LeaveTypeName.SICK: LeaveType(name=LeaveTypeName.SICK.value, is_carry_forward=False),
        LeaveTypeName.EARNED: LeaveType(name=LeaveTypeName.EARNED.value, is_carry_forward=True),
        LeaveTypeName.FLOATER: LeaveType(name=LeaveTypeName.FLOATER.value, is_carry_forward=False),
        LeaveTypeName.LOSS_OF_PAY: LeaveType(name=LeaveTypeName.LOSS_OF_PAY.value, is_carry_forward=False),
    }
    db_session.add_all(types.values())
    await db_session.flush()

    senior = await _create_employee(db_session, "Priya Raman", EmployeeRole.SENIOR_MANAGER)
    manager = await _create_employee(db_session, "Arjun Mehta", EmployeeRole.MANAGER, senior)
    employee = await _create_employee(db_session, "Kavya Iyer", EmployeeRole.EMPLOYEE, manager)
    intern = await _create_employee(db_session, "Rohan Das", EmployeeRole.INTERN, manager)
    lone = await _create_employee(db_session, "Meera Nair", EmployeeRole.EMPLOYEE)
    orphan_manager = await _create_employee(db_session, "Vikram Rao", EmployeeRole.MANAGER)
    orphan_report = await _create_employee(db_session, "Sana Khan", EmployeeRole.EMPLOYEE, orphan_manager)

    await db_session.commit()
    return Org(
        senior=senior,
        manager=manager,
        employee=employee,
        intern=intern,
        lone=lone,
        orphan_manager=orphan_manager,
        orphan_report=orphan_report,
        types=types,
    )
