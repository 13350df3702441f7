# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel

from leaveflow.models.enums import EmployeeRole


class AuthContext(BaseModel):
    """Principal asserted by the upstream identity layer via request headers."""

    employee_id: uuid.UUID
    role: EmployeeRole = EmployeeRole.EMPLOYEE
