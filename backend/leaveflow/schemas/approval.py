# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel

from leaveflow.models.enums import RequestStatus


class TrailEntryResponse(BaseModel):
    """One step of a request's approval trail."""

    id: uuid.UUID
    leave_request_id: uuid.UUID
    approver_id: uuid.UUID
    approver_name: str | None
    step: int
    status: RequestStatus
    remarks: str | None
    created_at: datetime


class TrailResponse(BaseModel):
    """Approval trail in chronological order."""

    items: list[TrailEntryResponse]
    total: int


class ApproverDecisionResponse(BaseModel):
    """An approval flow entry joined with the request it belongs to."""

    id: uuid.UUID
    leave_request_id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    leave_type: str
    from_date: date
    to_date: date
    reason: str
    request_status: RequestStatus
    approval_status: RequestStatus
    remarks: str | None
    created_at: datetime


class ApproverDecisionListResponse(BaseModel):
    """An approver's decisions, newest first."""

    items: list[ApproverDecisionResponse]
    total: int
