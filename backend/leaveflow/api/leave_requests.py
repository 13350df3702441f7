# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from leaveflow.api.deps import ApproverDep, AuthDep
from leaveflow.db import SessionDep
from leaveflow.schemas.approval import TrailResponse
from leaveflow.schemas.request import (
    DecisionPayload,
    DecisionResponse,
    LeaveRequestResponse,
    SubmitLeavePayload,
    SubmitLeaveResponse,
)
from leaveflow.services import approval as approval_service
from leaveflow.services import request as request_service

leave_requests_router = APIRouter(
    prefix="/leave-requests",
    tags=["leave-requests"],
)


@leave_requests_router.post("", response_model=SubmitLeaveResponse, status_code=status.HTTP_201_CREATED)
async def submit_leave_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> SubmitLeaveResponse:
    """Submit a new leave request for the authenticated employee."""
    return await request_service.submit_request(session, auth, payload)


@leave_requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await request_service.get_request(session, request_id)


@leave_requests_router.post("/{request_id}/decision", response_model=DecisionResponse)
async def decide_leave_request(
    request_id: uuid.UUID,
    payload: DecisionPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> DecisionResponse:
    """Approve or reject a pending request (assigned manager or senior manager only)."""
    return await request_service.decide_request(session, auth, request_id, payload)


@leave_requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Cancel a pending request (requesting employee only)."""
    return await request_service.cancel_request(session, auth, request_id)


@leave_requests_router.get("/{request_id}/trail", response_model=TrailResponse)
async def get_leave_request_trail(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> TrailResponse:
    """Approval trail of a request, oldest entry first."""
    return await approval_service.get_trail(session, request_id)
