"""Approval flow ledger queries: a request's trail and an approver's decisions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import aliased
from sqlmodel import col

from leaveflow.exceptions import NotFoundError
from leaveflow.models.approval import ApprovalFlowEntry
from leaveflow.models.employee import Employee
from leaveflow.models.enums import RequestStatus
from leaveflow.models.leave_type import LeaveType
from leaveflow.models.request import LeaveRequest
from leaveflow.schemas.approval import (
    ApproverDecisionListResponse,
    ApproverDecisionResponse,
    TrailEntryResponse,
    TrailResponse,
)
from leaveflow.services.employee import get_employee_or_404

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession


async def get_trail(session: AsyncSession, request_id: uuid.UUID) -> TrailResponse:
    """Approval flow entries of a request, oldest first."""
    exists = await session.execute(select(col(LeaveRequest.id)).where(col(LeaveRequest.id) == request_id))
    if exists.scalar_one_or_none() is None:
        raise NotFoundError("Leave request not found")

    result = await session.execute(
        select(ApprovalFlowEntry, col(Employee.name).label("approver_name"))  # ty: ignore[no-matching-overload]
        .outerjoin(Employee, col(Employee.id) == col(ApprovalFlowEntry.approver_id))
        .where(col(ApprovalFlowEntry.leave_request_id) == request_id)
        .order_by(col(ApprovalFlowEntry.created_at), col(ApprovalFlowEntry.step))
    )
    items = [
        TrailEntryResponse(
            id=entry.id,
            leave_request_id=entry.leave_request_id,
            approver_id=entry.approver_id,
            approver_name=approver_name,
            step=entry.step,
            status=RequestStatus(entry.status),
            remarks=entry.remarks,
            created_at=entry.created_at,
        )
        for entry, approver_name in result.all()
    ]
    return TrailResponse(items=items, total=len(items))


async def list_decisions_by(session: AsyncSession, approver_id: uuid.UUID) -> ApproverDecisionListResponse:
    """Every flow entry assigned to an approver, newest first, with its request."""
    await get_employee_or_404(session, approver_id)
    requester = aliased(Employee)

    result = await session.execute(
        select(  # ty: ignore[no-matching-overload]
            ApprovalFlowEntry,
            LeaveRequest,
            requester.name.label("employee_name"),  # type: ignore[union-attr]
            col(LeaveType.name).label("leave_type"),
        )
        .join(LeaveRequest, col(LeaveRequest.id) == col(ApprovalFlowEntry.leave_request_id))
        .join(requester, requester.id == col(LeaveRequest.employee_id))
        .join(LeaveType, col(LeaveType.id) == col(LeaveRequest.leave_type_id))
        .where(col(ApprovalFlowEntry.approver_id) == approver_id)
        .order_by(col(ApprovalFlowEntry.created_at).desc(), col(ApprovalFlowEntry.step).desc())
    )
    items = [
        ApproverDecisionResponse(
            id=entry.id,
            leave_request_id=leave_request.id,
            employee_id=leave_request.employee_id,
            employee_name=employee_name,
            leave_type=leave_type,
            from_date=leave_request.from_date,
            to_date=leave_request.to_date,
            reason=leave_request.reason,
            request_status=RequestStatus(leave_request.status),
            approval_status=RequestStatus(entry.status),
            remarks=entry.remarks,
            created_at=entry.created_at,
        )
        for entry, leave_request, employee_name, leave_type in result.all()
    ]
    return ApproverDecisionListResponse(items=items, total=len(items))
