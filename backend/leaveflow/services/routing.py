# ruff: noqa: TC003
"""Approval routing: who has to approve a request, and in how many steps.

Routing is a pure function of the hierarchy, the leave type, the requested
days and the current balance, so the same inputs always give the same chain.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from leaveflow.exceptions import NoApproverFoundError, ValidationError
from leaveflow.models.enums import ApprovalStep, LeaveTypeName, RequestStatus

if TYPE_CHECKING:
    from collections.abc import Collection

    from leaveflow.services.employee import EmployeeHierarchy


@dataclass(frozen=True)
class RoutedStep:
    """An approval flow entry to persist at submission."""

    approver_id: uuid.UUID
    step: ApprovalStep
    status: RequestStatus
    remarks: str


@dataclass(frozen=True)
class RoutingDecision:
    approver_chain: tuple[uuid.UUID, ...]
    initial_status: RequestStatus
    skips_approval: bool
    has_sufficient_balance: bool
    steps: tuple[RoutedStep, ...]

    @property
    def assigned_approver_id(self) -> uuid.UUID:
        return self.approver_chain[0]


def ensure_floater_dates(from_date: date, to_date: date, floater_dates: Collection[date]) -> None:
    """Floater leave is a single day taken on one of the company floater dates."""
    if from_date != to_date:
        raise ValidationError("Floater leave must start and end on the same day")
    if from_date not in floater_dates:
        raise ValidationError(
            "Floater leave can only be applied on company floater holidays; see the floater holiday list"
        )


def route(
    employee: EmployeeHierarchy,
    leave_type_name: str,
    requested_days: int,
    current_balance: int,
) -> RoutingDecision:
    """Decide the approval chain for a new request."""
    if employee.manager_id is None:
        raise NoApproverFoundError("No manager or senior manager found to approve the leave request")

    manager_id = employee.manager_id
    sufficient = current_balance >= requested_days

    match (leave_type_name, sufficient):
        case (LeaveTypeName.SICK, _):
            return RoutingDecision(
                approver_chain=(manager_id,),
                initial_status=RequestStatus.APPROVED,
                skips_approval=True,
                has_sufficient_balance=sufficient,
                steps=(
                    RoutedStep(
                        approver_id=manager_id,
                        step=ApprovalStep.MANAGER,
                        status=RequestStatus.APPROVED,
                        remarks="Sick leave auto-approved; manager notified",
                    ),
                ),
            )

        case (_, True):
            return RoutingDecision(
                approver_chain=(manager_id,),
                initial_status=RequestStatus.PENDING,
                skips_approval=False,
                has_sufficient_balance=True,
                steps=(
                    RoutedStep(
                        approver_id=manager_id,
                        step=ApprovalStep.MANAGER,
                        status=RequestStatus.PENDING,
                        remarks="Pending manager approval - sufficient balance",
                    ),
                ),
            )

        case _:
            # Insufficient balance: manager first, then the senior manager.
            steps = [
                RoutedStep(
                    approver_id=manager_id,
                    step=ApprovalStep.MANAGER,
                    status=RequestStatus.PENDING,
                    remarks="Pending manager approval - insufficient balance",
                )
            ]
            chain = [manager_id]
            # Without a senior manager the escalation fails when the manager approves.
            if employee.manager_of_manager_id is not None:
                steps.append(
                    RoutedStep(
                        approver_id=employee.manager_of_manager_id,
                        step=ApprovalStep.SENIOR_MANAGER,
                        status=RequestStatus.PENDING_SENIOR_MANAGER,
                        remarks="Pending senior manager approval - insufficient balance",
                    )
                )
                chain.append(employee.manager_of_manager_id)

            return RoutingDecision(
                approver_chain=tuple(chain),
                initial_status=RequestStatus.PENDING,
                skips_approval=False,
                has_sufficient_balance=False,
                steps=tuple(steps),
            )


def submission_message(leave_type_name: str, decision: RoutingDecision, total_days: int) -> str:
    """Human-readable outcome of a submission."""
    if decision.skips_approval:
        if decision.has_sufficient_balance:
            return f"{leave_type_name} approved and {total_days} day(s) deducted from balance"
        return f"{leave_type_name} approved; balance insufficient so no days were deducted"
    if decision.has_sufficient_balance:
        return f"{leave_type_name} request sent to manager for {total_days} day(s)"
    return f"{leave_type_name} balance insufficient; request routed to manager, then senior manager"
