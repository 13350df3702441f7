"""Leave request state machine: submission, decisions and cancellation.

Each transition is one transaction. Locks are always taken in the same order:
employee row, then leave request row, then balance rows.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.orm import aliased
from sqlmodel import col

from leaveflow.config import get_settings
from leaveflow.exceptions import (
    DuplicateRequestError,
    ForbiddenError,
    InvalidTransitionError,
    NoSeniorManagerError,
    NotFoundError,
    ValidationError,
)
from leaveflow.models.approval import ApprovalFlowEntry
from leaveflow.models.employee import Employee
from leaveflow.models.enums import (
    ACTIVE_STATUSES,
    PENDING_STATUSES,
    ApprovalStep,
    AuditAction,
    AuditEntityType,
    Decision,
    EmployeeRole,
    LeaveTypeName,
    RequestStatus,
)
from leaveflow.models.leave_type import LeaveType
from leaveflow.models.request import LeaveRequest
from leaveflow.schemas.request import (
    DecisionResponse,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    SubmitLeaveResponse,
)
from leaveflow.services.audit import request_snapshot, write_audit_log, write_purge_log
from leaveflow.services.balance import deduct, deduct_clamped, get_balance_for_update, get_balance_map
from leaveflow.services.employee import get_employee_hierarchy_or_404, get_employee_or_404, lock_employee
from leaveflow.services.holiday import get_holiday_provider
from leaveflow.services.routing import ensure_floater_dates, route, submission_message
from leaveflow.services.working_days import compute_working_days

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leaveflow.schemas.auth import AuthContext
    from leaveflow.schemas.request import DecisionPayload, SubmitLeavePayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(
    leave_request: LeaveRequest,
    *,
    leave_type: str | None = None,
    employee_name: str | None = None,
    approver_name: str | None = None,
) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=leave_request.id,
        employee_id=leave_request.employee_id,
        employee_name=employee_name,
        leave_type_id=leave_request.leave_type_id,
        leave_type=leave_type,
        from_date=leave_request.from_date,
        to_date=leave_request.to_date,
        reason=leave_request.reason,
        num_of_days=leave_request.num_of_days,
        status=RequestStatus(leave_request.status),
        rejection_reason=leave_request.rejection_reason,
        approver_id=leave_request.approver_id,
        approver_name=approver_name,
        created_at=leave_request.created_at,
        decided_at=leave_request.decided_at,
    )


def _request_with_names_query() -> Any:
    """Select requests together with leave type, employee and approver names."""
    approver = aliased(Employee)
    return (
        select(  # ty: ignore[no-matching-overload]
            LeaveRequest,
            col(LeaveType.name).label("leave_type"),
            col(Employee.name).label("employee_name"),
            approver.name.label("approver_name"),  # type: ignore[union-attr]
        )
        .join(LeaveType, col(LeaveType.id) == col(LeaveRequest.leave_type_id))
        .join(Employee, col(Employee.id) == col(LeaveRequest.employee_id))
        .outerjoin(approver, approver.id == col(LeaveRequest.approver_id))
    )


async def _build_named_response(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequestResponse:
    result = await session.execute(_request_with_names_query().where(col(LeaveRequest.id) == request_id))
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Leave request not found")
    return _build_request_response(
        row[0], leave_type=row.leave_type, employee_name=row.employee_name, approver_name=row.approver_name
    )


async def _get_leave_type_or_404(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    result = await session.execute(select(LeaveType).where(col(LeaveType.id) == leave_type_id))
    leave_type = result.scalar_one_or_none()
    if leave_type is None:
        raise NotFoundError("Leave type not found")
    return leave_type


async def _get_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    result = await session.execute(select(LeaveRequest).where(col(LeaveRequest.id) == request_id))
    leave_request = result.scalar_one_or_none()
    if leave_request is None:
        raise NotFoundError("Leave request not found")
    return leave_request


async def _lock_request(session: AsyncSession, request_id: uuid.UUID) -> tuple[Employee, LeaveRequest]:
    """Lock the owning employee row, then the request row, and return both."""
    leave_request = await _get_request_or_404(session, request_id)
    employee = await lock_employee(session, leave_request.employee_id)
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return employee, result.scalar_one()


async def _check_request_overlap(
    session: AsyncSession,
    employee_id: uuid.UUID,
    from_date: Any,
    to_date: Any,
) -> None:
    """Raise 409 if an active request has the same range or overlaps it.

    Active means pending or approved; cancelled and rejected requests free
    their dates.
    """
    result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.status).in_([s.value for s in ACTIVE_STATUSES]),
            col(LeaveRequest.from_date) <= to_date,
            col(LeaveRequest.to_date) >= from_date,
        )
    )
    existing = result.scalars().first()
    if existing is None:
        return
    if existing.from_date == from_date and existing.to_date == to_date:
        raise DuplicateRequestError(f"Leave already exists for the selected date range ({from_date} to {to_date})")
    raise DuplicateRequestError(
        f"Leave overlaps an existing request ({existing.from_date} to {existing.to_date})"
    )


async def _get_entries(
    session: AsyncSession,
    request_id: uuid.UUID,
    status: RequestStatus | None = None,
) -> list[ApprovalFlowEntry]:
    query = select(ApprovalFlowEntry).where(col(ApprovalFlowEntry.leave_request_id) == request_id)
    if status is not None:
        query = query.where(col(ApprovalFlowEntry.status) == status.value)
    result = await session.execute(query.order_by(col(ApprovalFlowEntry.step)))
    return list(result.scalars().all())


async def _purge_entries(
    session: AsyncSession,
    leave_request: LeaveRequest,
    entries: list[ApprovalFlowEntry],
    actor_id: uuid.UUID,
) -> None:
    """Delete approval flow entries, keeping a copy of them in the audit log."""
    if not entries:
        return
    await write_purge_log(session, actor_id=actor_id, leave_request_id=leave_request.id, entries=entries)
    for entry in entries:
        await session.delete(entry)
    await session.flush()


def _ensure_can_decide(auth: AuthContext) -> None:
    match auth.role:
        case EmployeeRole.MANAGER | EmployeeRole.SENIOR_MANAGER:
            return
        case EmployeeRole.EMPLOYEE | EmployeeRole.INTERN:
            raise ForbiddenError("Only managers or senior managers can approve or reject leave requests")


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeavePayload,
) -> SubmitLeaveResponse:
    """Submit a leave request.

    Flow:
    1. Authorize the principal as the requesting employee
    2. Resolve employee hierarchy and leave type
    3. Validate floater dates (floater leave only)
    4. Count working days; refuse ranges with none (except floater)
    5. Lock the employee row and reject duplicate or overlapping requests
    6. Route against the current balance
    7. Persist the request and its approval flow entries
    8. Sick leave: deduct immediately when the balance allows
    9. Audit and commit
    """
    if auth.employee_id != payload.employee_id:
        raise ForbiddenError("Employees can only submit leave requests for themselves")

    # 2. Hierarchy and leave type.
    hierarchy = await get_employee_hierarchy_or_404(session, payload.employee_id)
    leave_type = await _get_leave_type_or_404(session, payload.leave_type_id)
    is_floater = leave_type.name == LeaveTypeName.FLOATER
    floater_dates = get_settings().floater_holidays.keys()

    # 3. Floater validation happens before anything is routed.
    if is_floater:
        ensure_floater_dates(payload.from_date, payload.to_date, floater_dates)

    # 4. Working days.
    holidays = await get_holiday_provider().holidays_between(session, payload.from_date, payload.to_date)
    working = compute_working_days(payload.from_date, payload.to_date, holidays, leave_type.name, floater_dates)
    if not is_floater and working.all_invalid:
        raise ValidationError("Leave cannot be applied for weekends or public holidays only")

    # 5. Serialize submissions per employee, then check for duplicates.
    employee = await lock_employee(session, payload.employee_id)
    await _check_request_overlap(session, employee.id, payload.from_date, payload.to_date)

    # 6. Route.
    # Every balance writer holds the employee lock, so this read is stable.
    balances = await get_balance_map(session, employee.id)
    current_balance = balances.get(leave_type.name, 0)
    decision = route(hierarchy, leave_type.name, working.total_days, current_balance)

    # 7. Persist request and flow entries.
    now = datetime.now(UTC)
    leave_request = LeaveRequest(
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        from_date=payload.from_date,
        to_date=payload.to_date,
        reason=payload.reason,
        num_of_days=working.total_days,
        status=decision.initial_status.value,
        approver_id=decision.assigned_approver_id,
        decided_at=now if decision.skips_approval else None,
    )
    session.add(leave_request)
    await session.flush()

    for step in decision.steps:
        session.add(
            ApprovalFlowEntry(
                leave_request_id=leave_request.id,
                approver_id=step.approver_id,
                step=step.step,
                status=step.status.value,
                remarks=step.remarks,
            )
        )

    # 8. Sick leave is approved on submission.
    remaining_balance: int | None = None
    if decision.skips_approval and decision.has_sufficient_balance:
        remaining_balance = await deduct(session, employee, leave_type.id, working.total_days)
    if decision.skips_approval:
        logger.info("Sick leave %s auto-approved; manager %s notified", leave_request.id, decision.assigned_approver_id)

    await session.flush()

    # 9. Audit and commit.
    await write_audit_log(
        session,
        actor_id=auth.employee_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.SUBMIT,
        after_json=request_snapshot(leave_request, full=True),
    )

    await session.commit()
    logger.info(
        "Leave request %s submitted by %s: %s day(s) of %s, status %s",
        leave_request.id,
        employee.id,
        working.total_days,
        leave_type.name,
        leave_request.status,
    )

    return SubmitLeaveResponse(
        request=await _build_named_response(session, leave_request.id),
        message=submission_message(leave_type.name, decision, working.total_days),
        remaining_balance=remaining_balance,
    )


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------


async def decide_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: DecisionPayload,
) -> DecisionResponse:
    """Apply a manager or senior-manager decision to a pending request.

    The principal must hold a decision role and be the approver of the flow
    entry that is actionable for the request's current status.
    """
    _ensure_can_decide(auth)

    employee, leave_request = await _lock_request(session, request_id)
    status = RequestStatus(leave_request.status)
    if status not in PENDING_STATUSES:
        raise InvalidTransitionError(f"Leave request is {status.value}; only pending requests can be decided")

    actionable = [e for e in await _get_entries(session, leave_request.id, status) if e.approver_id == auth.employee_id]
    if not actionable:
        raise ForbiddenError("You are not the assigned approver for this leave request")
    entry = actionable[0]

    rejection_reason = (payload.rejection_reason or "").strip()
    if payload.decision == Decision.REJECT and not rejection_reason:
        raise ValidationError("Rejection reason is required")

    approver = await get_employee_hierarchy_or_404(session, auth.employee_id)
    before = request_snapshot(leave_request)
    now = datetime.now(UTC)

    match (status, payload.decision):
        case (RequestStatus.PENDING, Decision.REJECT):
            leave_request.status = RequestStatus.REJECTED.value
            leave_request.rejection_reason = rejection_reason
            leave_request.decided_at = now
            entry.status = RequestStatus.REJECTED.value
            entry.remarks = rejection_reason
            # The escalation is moot once the manager rejects.
            pending_senior = await _get_entries(session, leave_request.id, RequestStatus.PENDING_SENIOR_MANAGER)
            await _purge_entries(session, leave_request, pending_senior, auth.employee_id)
            action = AuditAction.REJECT
            message = f"Leave request rejected by {approver.name}"

        case (RequestStatus.PENDING, Decision.APPROVE):
            balance = await get_balance_for_update(session, employee.id, leave_request.leave_type_id)
            if balance >= leave_request.num_of_days:
                await deduct(session, employee, leave_request.leave_type_id, leave_request.num_of_days)
                leave_request.status = RequestStatus.APPROVED.value
                leave_request.rejection_reason = None
                leave_request.decided_at = now
                entry.status = RequestStatus.APPROVED.value
                entry.remarks = "Approved by manager"
                # Balance caught up since submission; the pre-created escalation is no longer needed.
                pending_senior = await _get_entries(session, leave_request.id, RequestStatus.PENDING_SENIOR_MANAGER)
                await _purge_entries(session, leave_request, pending_senior, auth.employee_id)
                action = AuditAction.APPROVE
                message = f"Leave approved by {approver.name}"
            else:
                senior_manager_id = approver.manager_id
                if senior_manager_id is None:
                    raise NoSeniorManagerError("Senior manager not found to approve the escalated request")
                await _ensure_senior_entry(session, leave_request.id, senior_manager_id)
                leave_request.status = RequestStatus.PENDING_SENIOR_MANAGER.value
                leave_request.rejection_reason = None
                leave_request.approver_id = senior_manager_id
                entry.status = RequestStatus.APPROVED.value
                entry.remarks = "Forwarded to senior manager"
                action = AuditAction.FORWARD
                message = f"Leave request forwarded to senior manager by {approver.name}"

        case (RequestStatus.PENDING_SENIOR_MANAGER, Decision.REJECT):
            leave_request.status = RequestStatus.REJECTED_SENIOR_MANAGER.value
            leave_request.rejection_reason = rejection_reason
            leave_request.decided_at = now
            entry.status = RequestStatus.REJECTED_SENIOR_MANAGER.value
            entry.remarks = rejection_reason
            action = AuditAction.REJECT
            message = f"Leave request rejected by {approver.name}"

        case (RequestStatus.PENDING_SENIOR_MANAGER, Decision.APPROVE):
            await deduct_clamped(session, employee, leave_request.leave_type_id, leave_request.num_of_days)
            leave_request.status = RequestStatus.APPROVED_SENIOR_MANAGER.value
            leave_request.rejection_reason = None
            leave_request.decided_at = now
            entry.status = RequestStatus.APPROVED_SENIOR_MANAGER.value
            entry.remarks = "Approved by senior manager"
            action = AuditAction.APPROVE
            message = f"Leave approved by {approver.name}"

        case _:
            raise InvalidTransitionError(f"Cannot apply {payload.decision.value} to a {status.value} request")

    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.employee_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=action,
        before_json=before,
        after_json=request_snapshot(leave_request),
    )

    await session.commit()
    logger.info(
        "Leave request %s: %s by %s -> %s", leave_request.id, payload.decision.value, auth.employee_id, leave_request.status
    )
    return DecisionResponse(request=await _build_named_response(session, leave_request.id), message=message)


async def _ensure_senior_entry(session: AsyncSession, request_id: uuid.UUID, senior_manager_id: uuid.UUID) -> None:
    """Make sure the escalation entry exists and points at the current senior manager.

    It is normally pre-committed at submission; it is missing when the balance
    was sufficient at submission but is no longer at approval time.
    """
    existing = await _get_entries(session, request_id, RequestStatus.PENDING_SENIOR_MANAGER)
    if existing:
        existing[0].approver_id = senior_manager_id
        return
    session.add(
        ApprovalFlowEntry(
            leave_request_id=request_id,
            approver_id=senior_manager_id,
            step=ApprovalStep.SENIOR_MANAGER,
            status=RequestStatus.PENDING_SENIOR_MANAGER.value,
            remarks="Pending senior manager approval - insufficient balance",
        )
    )


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


async def cancel_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Cancel a pending request: purge its approval flow and mark it CANCELLED.

    Only the requesting employee may cancel. No balance is touched because
    deduction happens only at the terminal approval step.
    """
    leave_request = await _get_request_or_404(session, request_id)
    if leave_request.employee_id != auth.employee_id:
        raise ForbiddenError("You are not authorized to cancel this leave request")

    _, leave_request = await _lock_request(session, request_id)
    status = RequestStatus(leave_request.status)
    if status not in PENDING_STATUSES:
        raise InvalidTransitionError(f"Leave request is {status.value}; only pending requests can be cancelled")

    before = request_snapshot(leave_request)

    entries = await _get_entries(session, leave_request.id)
    await _purge_entries(session, leave_request, entries, auth.employee_id)

    leave_request.status = RequestStatus.CANCELLED.value
    leave_request.decided_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.employee_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.CANCEL,
        before_json=before,
        after_json=request_snapshot(leave_request),
    )

    await session.commit()
    logger.info("Leave request %s cancelled by %s", leave_request.id, auth.employee_id)
    return await _build_named_response(session, leave_request.id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_request(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequestResponse:
    """Get a single request by ID."""
    return await _build_named_response(session, request_id)


async def _list_requests(session: AsyncSession, *filters: Any) -> LeaveRequestListResponse:
    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        _request_with_names_query().where(*filters).order_by(col(LeaveRequest.created_at).desc())
    )
    items = [
        _build_request_response(
            row[0], leave_type=row.leave_type, employee_name=row.employee_name, approver_name=row.approver_name
        )
        for row in result.all()
    ]
    return LeaveRequestListResponse(items=items, total=total)


async def list_history(session: AsyncSession, employee_id: uuid.UUID) -> LeaveRequestListResponse:
    """All of an employee's requests, newest first."""
    await get_employee_or_404(session, employee_id)
    return await _list_requests(session, col(LeaveRequest.employee_id) == employee_id)


async def list_pending_for(session: AsyncSession, manager_id: uuid.UUID) -> LeaveRequestListResponse:
    """Requests currently waiting on the given approver, newest first."""
    await get_employee_or_404(session, manager_id)
    return await _list_requests(
        session,
        col(LeaveRequest.approver_id) == manager_id,
        col(LeaveRequest.status).in_([s.value for s in PENDING_STATUSES]),
    )
