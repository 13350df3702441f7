"""Annual carry-forward batch job."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from leaveflow.config import get_settings
from leaveflow.exceptions import JobAlreadyRunError
from leaveflow.models.balance import LeaveBalance
from leaveflow.models.employee import Employee
from leaveflow.models.enums import EmployeeRole, LeaveTypeName
from leaveflow.services import carryforward as carryforward_module
from leaveflow.services.balance import get_balance_map
from leaveflow.services.carryforward import run_annual_carry_forward

if TYPE_CHECKING:
    import uuid

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from conftest import Org
    from leaveflow.models.leave_type import LeaveType

NEW_YEAR = date(2027, 1, 1)


async def _set_balance(session: AsyncSession, employee: Employee, leave_type: LeaveType, amount: int) -> None:
    session.add(LeaveBalance(employee_id=employee.id, leave_type_id=leave_type.id, balance=amount))
    employee.total_leave_balance += amount
    await session.commit()


async def test_only_carry_forward_balances_survive(db_session: AsyncSession, org: Org) -> None:
    await _set_balance(db_session, org.employee, org.types[LeaveTypeName.SICK], 4)
    await _set_balance(db_session, org.employee, org.types[LeaveTypeName.EARNED], 7)
    await _set_balance(db_session, org.employee, org.types[LeaveTypeName.FLOATER], 1)
    await _set_balance(db_session, org.manager, org.types[LeaveTypeName.EARNED], 9)
    employee_id, manager_id = org.employee.id, org.manager.id

    result = await run_annual_carry_forward(db_session, NEW_YEAR)

    assert result.period == "2027"
    assert result.errors == 0
    assert result.updated == 1
    assert result.processed == 7

    balances = await get_balance_map(db_session, employee_id)
    assert balances == {"earned_leave": 7, "floater_leave": 0, "loss_of_pay": 0, "sick_leave": 0}
    employee = await db_session.get(Employee, employee_id, populate_existing=True)
    assert employee is not None
    assert employee.total_leave_balance == 7
    assert (await get_balance_map(db_session, manager_id))["earned_leave"] == 9


async def test_carry_forward_runs_once_per_year(db_session: AsyncSession, org: Org) -> None:
    await _set_balance(db_session, org.employee, org.types[LeaveTypeName.SICK], 4)
    await run_annual_carry_forward(db_session, NEW_YEAR)

    with pytest.raises(JobAlreadyRunError):
        await run_annual_carry_forward(db_session, date(2027, 6, 1))


async def test_failed_carry_forward_can_be_retried(
    db_session: AsyncSession, org: Org, monkeypatch: pytest.MonkeyPatch
) -> None:
    await _set_balance(db_session, org.employee, org.types[LeaveTypeName.SICK], 4)
    employee_id = org.employee.id

    async def _unavailable(session: AsyncSession) -> list[tuple[uuid.UUID, EmployeeRole]]:
        raise RuntimeError("directory unavailable")

    with monkeypatch.context() as patch:
        patch.setattr(carryforward_module, "list_employee_roles", _unavailable)
        with pytest.raises(RuntimeError):
            await run_annual_carry_forward(db_session, NEW_YEAR)

    result = await run_annual_carry_forward(db_session, NEW_YEAR)
    assert result.updated == 1
    assert (await get_balance_map(db_session, employee_id))["sick_leave"] == 0


async def test_carry_forward_trigger(
    async_client: AsyncClient, db_session: AsyncSession, org: Org, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(get_settings(), "scheduler_api_key", "key")
    await _set_balance(db_session, org.employee, org.types[LeaveTypeName.SICK], 4)

    resp = await async_client.post(
        "/jobs/annual-carry-forward",
        params={"target_date": "2027-01-01"},
        headers={"X-Scheduler-Key": "key"},
    )
    assert resp.status_code == 200
    assert resp.json()["job_name"] == "annual_carry_forward"
    assert resp.json()["updated"] == 1
