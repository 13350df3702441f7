# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter

from leaveflow.api.deps import AuthDep
from leaveflow.db import SessionDep
from leaveflow.schemas.approval import ApproverDecisionListResponse
from leaveflow.schemas.balance import BalanceResponse
from leaveflow.schemas.request import LeaveRequestListResponse
from leaveflow.services import approval as approval_service
from leaveflow.services import balance as balance_service
from leaveflow.services import request as request_service

employees_router = APIRouter(
    prefix="/employees/{employee_id}",
    tags=["employees"],
)


@employees_router.get("/balances", response_model=BalanceResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Per-leave-type balances and the cached total."""
    return await balance_service.get_balances(session, employee_id)


@employees_router.get("/leave-requests", response_model=LeaveRequestListResponse)
async def list_employee_leave_requests(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestListResponse:
    """An employee's leave history, newest first."""
    return await request_service.list_history(session, employee_id)


@employees_router.get("/pending-approvals", response_model=LeaveRequestListResponse)
async def list_pending_approvals(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestListResponse:
    """Requests waiting on this approver."""
    return await request_service.list_pending_for(session, employee_id)


@employees_router.get("/decisions", response_model=ApproverDecisionListResponse)
async def list_approver_decisions(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ApproverDecisionListResponse:
    """Approval flow entries assigned to this approver, newest first."""
    return await approval_service.list_decisions_by(session, employee_id)
