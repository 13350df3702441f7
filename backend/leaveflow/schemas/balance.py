# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Per-leave-type balances for an employee, zero-filled for every known type."""

    employee_id: uuid.UUID
    balances: dict[str, int]
    total_leave_balance: int
