"""Balance ledger: one integer day balance per (employee, leave type).

Every read-modify-write locks the balance row with SELECT ... FOR UPDATE, and
callers hold the employee row lock first (see ``lock_employee``). The employee's
cached ``total_leave_balance`` is always written in the same transaction as the
rows it is derived from.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import and_, func, select
from sqlmodel import col

from leaveflow.exceptions import InsufficientBalanceError, ValidationError
from leaveflow.models.balance import LeaveBalance
from leaveflow.models.leave_type import LeaveType
from leaveflow.schemas.balance import BalanceResponse
from leaveflow.services.employee import get_employee_or_404

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leaveflow.models.employee import Employee

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _get_or_create_balance_for_update(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
) -> LeaveBalance:
    """Get the balance row with a FOR UPDATE lock, creating it at zero if absent.

    Creation is safe because the caller holds the employee row lock.
    """
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
        )
        .with_for_update()
    )
    row = result.scalar_one_or_none()

    if row is None:
        row = LeaveBalance(employee_id=employee_id, leave_type_id=leave_type_id, balance=0, version=1)
        session.add(row)
        await session.flush()

    return row


def _set_balance(row: LeaveBalance, new_balance: int) -> None:
    if new_balance < 0:
        msg = f"balance for employee {row.employee_id} would become negative"
        raise InsufficientBalanceError(msg)
    row.balance = new_balance
    row.version += 1


async def recompute_total(session: AsyncSession, employee: Employee) -> int:
    """Set the employee's cached total to the sum of all of their balance rows."""
    await session.flush()
    result = await session.execute(
        select(func.coalesce(func.sum(col(LeaveBalance.balance)), 0)).where(
            col(LeaveBalance.employee_id) == employee.id
        )
    )
    total = int(result.scalar_one())
    employee.total_leave_balance = total
    return total


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_balance_map(session: AsyncSession, employee_id: uuid.UUID) -> dict[str, int]:
    """Balances keyed by leave type name, zero-filled for types with no row."""
    result = await session.execute(
        select(  # ty: ignore[no-matching-overload]
            col(LeaveType.name),
            func.coalesce(col(LeaveBalance.balance), 0),
        )
        .select_from(LeaveType)
        .outerjoin(
            LeaveBalance,
            and_(
                col(LeaveBalance.leave_type_id) == col(LeaveType.id),
                col(LeaveBalance.employee_id) == employee_id,
            ),
        )
        .order_by(col(LeaveType.name))
    )
    return {name: int(balance) for name, balance in result.all()}


async def get_balances(session: AsyncSession, employee_id: uuid.UUID) -> BalanceResponse:
    """All leave-type balances for an employee."""
    employee = await get_employee_or_404(session, employee_id)
    balances = await get_balance_map(session, employee_id)
    return BalanceResponse(
        employee_id=employee.id,
        balances=balances,
        total_leave_balance=employee.total_leave_balance,
    )


async def get_balance_for_update(session: AsyncSession, employee_id: uuid.UUID, leave_type_id: uuid.UUID) -> int:
    """Current balance of one row, locked for the rest of the transaction."""
    row = await _get_or_create_balance_for_update(session, employee_id, leave_type_id)
    return row.balance


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


async def deduct(
    session: AsyncSession,
    employee: Employee,
    leave_type_id: uuid.UUID,
    days: int,
) -> int:
    """Deduct ``days`` from the balance, failing if it would go negative.

    The caller must hold the employee row lock. Returns the new balance.
    """
    if days < 0:
        raise ValidationError("Cannot deduct a negative number of days")

    row = await _get_or_create_balance_for_update(session, employee.id, leave_type_id)
    if row.balance - days < 0:
        raise InsufficientBalanceError(f"Insufficient leave balance: {row.balance} available, {days} requested")

    _set_balance(row, row.balance - days)
    employee.total_leave_balance -= days
    await session.flush()
    return row.balance


async def deduct_clamped(
    session: AsyncSession,
    employee: Employee,
    leave_type_id: uuid.UUID,
    days: int,
) -> int:
    """Deduct ``days`` but never below zero, then recompute the cached total.

    The clamp makes an incremental total update wrong, so the total is always
    recomputed from every row. Returns the new balance.
    """
    row = await _get_or_create_balance_for_update(session, employee.id, leave_type_id)
    _set_balance(row, max(0, row.balance - days))
    await recompute_total(session, employee)
    return row.balance


async def accrue(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    amount: int,
    cap: int,
) -> int:
    """Add ``amount`` days, capped at ``cap``. Returns the amount actually added.

    A missing row is seeded at ``min(amount, cap)``. A balance already above the
    cap is left untouched rather than clawed back. The caller updates the
    employee's cached total.
    """
    row = await _get_or_create_balance_for_update(session, employee_id, leave_type_id)
    old_balance = row.balance
    new_balance = max(old_balance, min(old_balance + amount, cap))
    if new_balance != old_balance:
        _set_balance(row, new_balance)
    return new_balance - old_balance


async def reset_non_carry_forward(session: AsyncSession, employee: Employee) -> int:
    """Zero every non-carry-forward balance of the employee and recompute the total.

    Returns the number of rows that were reset.
    """
    result = await session.execute(
        select(LeaveBalance)
        .join(LeaveType, col(LeaveType.id) == col(LeaveBalance.leave_type_id))
        .where(
            col(LeaveBalance.employee_id) == employee.id,
            col(LeaveType.is_carry_forward).is_(False),
        )
        .with_for_update(of=LeaveBalance)
    )
    reset = 0
    for row in result.scalars().all():
        if row.balance != 0:
            _set_balance(row, 0)
            reset += 1

    await recompute_total(session, employee)
    return reset
