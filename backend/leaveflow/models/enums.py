from __future__ import annotations

import enum


class EmployeeRole(enum.StrEnum):
    """Closed set of roles; only managers and senior managers decide requests."""

    INTERN = "INTERN"
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    SENIOR_MANAGER = "SENIOR_MANAGER"


class LeaveTypeName(enum.StrEnum):
    """Leave types the engine gives special routing to."""

    SICK = "sick_leave"
    EARNED = "earned_leave"
    FLOATER = "floater_leave"
    LOSS_OF_PAY = "loss_of_pay"


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    PENDING_SENIOR_MANAGER = "PENDING_SENIOR_MANAGER"
    APPROVED = "APPROVED"
    APPROVED_SENIOR_MANAGER = "APPROVED_SENIOR_MANAGER"
    REJECTED = "REJECTED"
    REJECTED_SENIOR_MANAGER = "REJECTED_SENIOR_MANAGER"
    CANCELLED = "CANCELLED"


PENDING_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.PENDING_SENIOR_MANAGER})

# Requests in these states occupy their date range.
ACTIVE_STATUSES = frozenset(
    {
        RequestStatus.PENDING,
        RequestStatus.PENDING_SENIOR_MANAGER,
        RequestStatus.APPROVED,
        RequestStatus.APPROVED_SENIOR_MANAGER,
    }
)


class Decision(enum.StrEnum):
    """Approver's verdict on a pending request."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


class ApprovalStep(enum.IntEnum):
    """Escalation level of an approval flow entry."""

    MANAGER = 1
    SENIOR_MANAGER = 2


class BatchJobName(enum.StrEnum):
    MONTHLY_ACCRUAL = "monthly_accrual"
    ANNUAL_CARRY_FORWARD = "annual_carry_forward"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"
    LEAVE_BALANCE = "LEAVE_BALANCE"
    APPROVAL_FLOW = "APPROVAL_FLOW"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    FORWARD = "FORWARD"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    PURGE = "PURGE"
    ACCRUE = "ACCRUE"
    RESET = "RESET"
