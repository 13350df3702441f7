# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leaveflow.models.base import UUIDBase
from leaveflow.models.enums import EmployeeRole


class Employee(UUIDBase, table=True):
    """Directory record. The engine only ever writes ``total_leave_balance``."""

    __tablename__ = "employee"

    name: str = Field(max_length=255)
    department: str = Field(max_length=255)
    role: str = Field(default=EmployeeRole.EMPLOYEE, max_length=50)
    manager_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="SET NULL"), nullable=True, index=True),
    )
    total_leave_balance: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
