"""Annual carry-forward: non-carry-forward balances do not survive the year boundary."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from leaveflow.models.enums import AuditAction, AuditEntityType, BatchJobName
from leaveflow.services.audit import write_audit_log
from leaveflow.services.balance import reset_non_carry_forward
from leaveflow.services.employee import list_employee_roles, lock_employee
from leaveflow.services.job_run import BatchRunResult, claim_job_run, complete_job_run, release_job_run

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def run_annual_carry_forward(session: AsyncSession, today: date | None = None) -> BatchRunResult:
    """Zero every non-carry-forward balance for the year of ``today``.

    Carry-forward types (earned leave) keep their balance. Each employee is
    committed separately with its recomputed total; failures are logged,
    counted and skipped.
    """
    if today is None:
        today = date.today()
    period = f"{today.year:04d}"

    run_id = await claim_job_run(session, BatchJobName.ANNUAL_CARRY_FORWARD, period)
    result = BatchRunResult(job_name=BatchJobName.ANNUAL_CARRY_FORWARD.value, period=period)

    try:
        employees = await list_employee_roles(session)
    except Exception:
        await release_job_run(session, run_id)
        raise

    for employee_id, _role in employees:
        try:
            employee = await lock_employee(session, employee_id)
            before_total = employee.total_leave_balance
            reset = await reset_non_carry_forward(session, employee)

            if reset > 0:
                await write_audit_log(
                    session,
                    actor_id=None,
                    entity_type=AuditEntityType.LEAVE_BALANCE,
                    entity_id=employee_id,
                    action=AuditAction.RESET,
                    before_json={"total": before_total},
                    after_json={"period": period, "rows_reset": reset, "total": employee.total_leave_balance},
                )
                result.updated += 1
            else:
                result.skipped += 1

            await session.commit()
            result.processed += 1
        except Exception:
            await session.rollback()
            logger.exception("Annual carry-forward failed for employee=%s year=%s", employee_id, period)
            result.errors += 1

    await complete_job_run(session, run_id, result)
    logger.info(
        "Annual carry-forward %s complete: processed=%d updated=%d skipped=%d errors=%d",
        period,
        result.processed,
        result.updated,
        result.skipped,
        result.errors,
    )
    return result
