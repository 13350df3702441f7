from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from leaveflow.models import SQLModel
from leaveflow.models.balance import LeaveBalance
from leaveflow.models.enums import ACTIVE_STATUSES, PENDING_STATUSES, LeaveTypeName, RequestStatus
from leaveflow.models.job_run import BatchJobRun
from leaveflow.models.leave_type import LeaveType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from conftest import Org

EXPECTED_TABLES = {
    "employee",
    "leave_type",
    "leave_policy",
    "leave_balance",
    "leave_request",
    "approval_flow_entry",
    "company_holiday",
    "batch_job_run",
    "audit_log",
}


def test_all_tables_registered() -> None:
    assert set(SQLModel.metadata.tables) == EXPECTED_TABLES


def test_status_groups() -> None:
    assert PENDING_STATUSES <= ACTIVE_STATUSES
    assert RequestStatus.CANCELLED not in ACTIVE_STATUSES
    assert RequestStatus.REJECTED not in ACTIVE_STATUSES
    assert RequestStatus.REJECTED_SENIOR_MANAGER not in ACTIVE_STATUSES


async def test_balance_unique_per_employee_and_type(db_session: AsyncSession, org: Org) -> None:
    earned = org.types[LeaveTypeName.EARNED]
    db_session.add(LeaveBalance(employee_id=org.employee.id, leave_type_id=earned.id, balance=1))
    await db_session.commit()

    db_session.add(LeaveBalance(employee_id=org.employee.id, leave_type_id=earned.id, balance=2))
    with pytest.raises(IntegrityError):
        await db_session.flush()


async def test_balance_cannot_be_negative(db_session: AsyncSession, org: Org) -> None:
    db_session.add(
        LeaveBalance(employee_id=org.employee.id, leave_type_id=org.types[LeaveTypeName.SICK].id, balance=-1)
    )
    with pytest.raises(IntegrityError):
        await db_session.flush()


async def test_leave_type_names_unique(db_session: AsyncSession, org: Org) -> None:
    db_session.add(LeaveType(name=LeaveTypeName.SICK.value))
    with pytest.raises(IntegrityError):
        await db_session.flush()


async def test_job_run_unique_per_period(db_session: AsyncSession) -> None:
    db_session.add(BatchJobRun(job_name="monthly_accrual", period="2026-01"))
    await db_session.commit()

    db_session.add(BatchJobRun(job_name="monthly_accrual", period="2026-01"))
    with pytest.raises(IntegrityError):
        await db_session.flush()
