# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leaveflow.models.base import UUIDBase


class LeaveType(UUIDBase, table=True):
    """Static reference data: a category of absence."""

    __tablename__ = "leave_type"

    name: str = Field(max_length=100, unique=True)
    is_carry_forward: bool = False


class LeavePolicy(UUIDBase, table=True):
    """Monthly accrual and annual cap for one (role, leave type) pair."""

    __tablename__ = "leave_policy"
    __table_args__ = (sa.UniqueConstraint("employee_role", "leave_type_id", name="uq_policy_role_leave_type"),)

    employee_role: str = Field(max_length=50, index=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="CASCADE"), nullable=False),
    )
    accrual_per_month: int = Field(default=0, ge=0)
    max_days_per_year: int = Field(default=0, ge=0)
