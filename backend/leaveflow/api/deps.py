# ruff: noqa: B008, TC003
from __future__ import annotations

import secrets
import uuid
from typing import Annotated

from fastapi import Depends, Header

from leaveflow.config import get_settings
from leaveflow.exceptions import ForbiddenError
from leaveflow.models.enums import EmployeeRole
from leaveflow.schemas.auth import AuthContext


async def get_auth_context(
    x_employee_id: uuid.UUID = Header(),
    x_role: EmployeeRole = Header(default=EmployeeRole.EMPLOYEE),
) -> AuthContext:
    """Extract the principal asserted by the upstream gateway from request headers."""
    return AuthContext(employee_id=x_employee_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_approver(
    auth: AuthDep,
) -> AuthContext:
    """Require a role that may decide leave requests."""
    match auth.role:
        case EmployeeRole.MANAGER | EmployeeRole.SENIOR_MANAGER:
            return auth
        case EmployeeRole.EMPLOYEE | EmployeeRole.INTERN:
            raise ForbiddenError("Only managers or senior managers can approve or reject leave requests")


ApproverDep = Annotated[AuthContext, Depends(require_approver)]


async def require_scheduler(
    x_scheduler_key: str | None = Header(default=None),
) -> None:
    """Only the scheduler may trigger batch jobs over HTTP."""
    expected = get_settings().scheduler_api_key
    if expected is None or x_scheduler_key is None or not secrets.compare_digest(expected, x_scheduler_key):
        raise ForbiddenError("A valid scheduler key is required")
