from __future__ import annotations

import uuid
from datetime import date

import pytest

from leaveflow.exceptions import NoApproverFoundError, ValidationError
from leaveflow.models.enums import ApprovalStep, EmployeeRole, LeaveTypeName, RequestStatus
from leaveflow.services.employee import EmployeeHierarchy
from leaveflow.services.routing import ensure_floater_dates, route, submission_message

MANAGER_ID = uuid.uuid4()
SENIOR_ID = uuid.uuid4()
FLOATERS = {date(2026, 1, 14), date(2026, 3, 4)}


def _employee(manager_id: uuid.UUID | None = MANAGER_ID, senior_id: uuid.UUID | None = SENIOR_ID) -> EmployeeHierarchy:
    return EmployeeHierarchy(
        id=uuid.uuid4(),
        name="Kavya Iyer",
        role=EmployeeRole.EMPLOYEE,
        manager_id=manager_id,
        manager_of_manager_id=senior_id,
    )


# ---------------------------------------------------------------------------
# route
# ---------------------------------------------------------------------------


def test_sick_leave_is_auto_approved() -> None:
    decision = route(_employee(), LeaveTypeName.SICK, 2, 3)
    assert decision.initial_status == RequestStatus.APPROVED
    assert decision.skips_approval
    assert decision.has_sufficient_balance
    assert decision.approver_chain == (MANAGER_ID,)
    assert len(decision.steps) == 1
    assert decision.steps[0].status == RequestStatus.APPROVED
    assert decision.steps[0].step == ApprovalStep.MANAGER


def test_sick_leave_never_escalates() -> None:
    decision = route(_employee(), LeaveTypeName.SICK, 5, 1)
    assert decision.initial_status == RequestStatus.APPROVED
    assert not decision.has_sufficient_balance
    assert decision.approver_chain == (MANAGER_ID,)
    assert all(s.step == ApprovalStep.MANAGER for s in decision.steps)


def test_sufficient_balance_goes_to_manager_only() -> None:
    decision = route(_employee(), LeaveTypeName.EARNED, 3, 3)
    assert decision.initial_status == RequestStatus.PENDING
    assert not decision.skips_approval
    assert decision.approver_chain == (MANAGER_ID,)
    assert [s.status for s in decision.steps] == [RequestStatus.PENDING]


def test_insufficient_balance_pre_commits_senior_step() -> None:
    decision = route(_employee(), LeaveTypeName.EARNED, 3, 1)
    assert decision.initial_status == RequestStatus.PENDING
    assert decision.approver_chain == (MANAGER_ID, SENIOR_ID)
    assert decision.assigned_approver_id == MANAGER_ID
    assert [(s.approver_id, s.status) for s in decision.steps] == [
        (MANAGER_ID, RequestStatus.PENDING),
        (SENIOR_ID, RequestStatus.PENDING_SENIOR_MANAGER),
    ]


def test_insufficient_balance_without_senior_manager_routes_to_manager() -> None:
    decision = route(_employee(senior_id=None), LeaveTypeName.EARNED, 3, 0)
    assert decision.approver_chain == (MANAGER_ID,)
    assert len(decision.steps) == 1


def test_no_manager_raises() -> None:
    with pytest.raises(NoApproverFoundError):
        route(_employee(manager_id=None, senior_id=None), LeaveTypeName.EARNED, 1, 10)


def test_route_is_deterministic() -> None:
    employee = _employee()
    assert route(employee, LeaveTypeName.EARNED, 4, 2) == route(employee, LeaveTypeName.EARNED, 4, 2)


# ---------------------------------------------------------------------------
# ensure_floater_dates
# ---------------------------------------------------------------------------


def test_floater_on_floater_date_passes() -> None:
    ensure_floater_dates(date(2026, 1, 14), date(2026, 1, 14), FLOATERS)


def test_floater_on_other_date_raises() -> None:
    with pytest.raises(ValidationError):
        ensure_floater_dates(date(2026, 1, 15), date(2026, 1, 15), FLOATERS)


def test_floater_spanning_days_raises() -> None:
    with pytest.raises(ValidationError):
        ensure_floater_dates(date(2026, 1, 14), date(2026, 1, 15), FLOATERS)


def test_submission_messages() -> None:
    employee = _employee()
    assert "deducted" in submission_message("sick_leave", route(employee, LeaveTypeName.SICK, 1, 2), 1)
    assert "no days were deducted" in submission_message("sick_leave", route(employee, LeaveTypeName.SICK, 3, 2), 3)
    assert "senior manager" in submission_message("earned_leave", route(employee, LeaveTypeName.EARNED, 3, 2), 3)
