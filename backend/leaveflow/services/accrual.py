# ruff: noqa: TC003
"""Monthly accrual: add each role's monthly allowance, capped at the annual maximum."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leaveflow.models.enums import AuditAction, AuditEntityType, BatchJobName, EmployeeRole
from leaveflow.models.leave_type import LeavePolicy
from leaveflow.services.audit import write_audit_log
from leaveflow.services.balance import accrue
from leaveflow.services.employee import list_employee_roles, lock_employee
from leaveflow.services.job_run import BatchRunResult, claim_job_run, complete_job_run, release_job_run

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

PolicyRow = tuple[uuid.UUID, int, int]


async def _policies_by_role(session: AsyncSession) -> dict[EmployeeRole, list[PolicyRow]]:
    """(leave_type_id, accrual_per_month, max_days_per_year) per role, as plain tuples."""
    result = await session.execute(
        select(  # ty: ignore[no-matching-overload]
            col(LeavePolicy.employee_role),
            col(LeavePolicy.leave_type_id),
            col(LeavePolicy.accrual_per_month),
            col(LeavePolicy.max_days_per_year),
        ).order_by(col(LeavePolicy.employee_role), col(LeavePolicy.leave_type_id))
    )
    policies: dict[EmployeeRole, list[PolicyRow]] = defaultdict(list)
    for role, leave_type_id, per_month, cap in result.all():
        policies[EmployeeRole(role)].append((leave_type_id, per_month, cap))
    return policies


async def run_monthly_accrual(session: AsyncSession, today: date | None = None) -> BatchRunResult:
    """Accrue every employee's monthly allowance for the month of ``today``.

    Each employee is committed separately. A failure rolls back only that
    employee, is logged and counted, and the run moves on.
    """
    if today is None:
        today = date.today()
    period = f"{today.year:04d}-{today.month:02d}"

    run_id = await claim_job_run(session, BatchJobName.MONTHLY_ACCRUAL, period)
    result = BatchRunResult(job_name=BatchJobName.MONTHLY_ACCRUAL.value, period=period)

    try:
        policies = await _policies_by_role(session)
        employees = await list_employee_roles(session)
    except Exception:
        await release_job_run(session, run_id)
        raise

    for employee_id, role in employees:
        try:
            employee = await lock_employee(session, employee_id)
            added = 0
            for leave_type_id, per_month, cap in policies.get(role, []):
                added += await accrue(session, employee_id, leave_type_id, per_month, cap)

            if added > 0:
                employee.total_leave_balance += added
                await session.flush()
                await write_audit_log(
                    session,
                    actor_id=None,
                    entity_type=AuditEntityType.LEAVE_BALANCE,
                    entity_id=employee_id,
                    action=AuditAction.ACCRUE,
                    after_json={"period": period, "added": added, "total": employee.total_leave_balance},
                )
                result.updated += 1
            else:
                result.skipped += 1

            await session.commit()
            result.processed += 1
        except Exception:
            await session.rollback()
            logger.exception("Monthly accrual failed for employee=%s period=%s", employee_id, period)
            result.errors += 1

    await complete_job_run(session, run_id, result)
    logger.info(
        "Monthly accrual %s complete: processed=%d updated=%d skipped=%d errors=%d",
        period,
        result.processed,
        result.updated,
        result.skipped,
        result.errors,
    )
    return result
