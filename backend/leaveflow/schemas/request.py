# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leaveflow.models.enums import Decision, RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a new leave request."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    from_date: date
    to_date: date
    reason: str = Field(min_length=1, max_length=250)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.to_date < self.from_date:
            msg = "to_date must be on or after from_date"
            raise ValueError(msg)
        return self


class DecisionPayload(BaseModel):
    """Request body for an approver's decision."""

    decision: Decision
    rejection_reason: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str | None = None
    leave_type_id: uuid.UUID
    leave_type: str | None = None
    from_date: date
    to_date: date
    reason: str
    num_of_days: int
    status: RequestStatus
    rejection_reason: str | None
    approver_id: uuid.UUID | None
    approver_name: str | None = None
    created_at: datetime
    decided_at: datetime | None


class LeaveRequestListResponse(BaseModel):
    """List of leave requests, newest first."""

    items: list[LeaveRequestResponse]
    total: int


class SubmitLeaveResponse(BaseModel):
    """Outcome of a submission: the stored request plus a human-readable message."""

    request: LeaveRequestResponse
    message: str
    remaining_balance: int | None = None


class DecisionResponse(BaseModel):
    """Outcome of a manager or senior-manager decision."""

    request: LeaveRequestResponse
    message: str
