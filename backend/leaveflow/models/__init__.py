from sqlmodel import SQLModel

from leaveflow.models.approval import ApprovalFlowEntry
from leaveflow.models.audit import AuditLog
from leaveflow.models.balance import LeaveBalance
from leaveflow.models.base import TimestampMixin, UUIDBase
from leaveflow.models.employee import Employee
from leaveflow.models.enums import (
    ApprovalStep,
    AuditAction,
    AuditEntityType,
    BatchJobName,
    Decision,
    EmployeeRole,
    LeaveTypeName,
    RequestStatus,
)
from leaveflow.models.holiday import CompanyHoliday
from leaveflow.models.job_run import BatchJobRun
from leaveflow.models.leave_type import LeavePolicy, LeaveType
from leaveflow.models.request import LeaveRequest

__all__ = [
    "ApprovalFlowEntry",
    "ApprovalStep",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "BatchJobName",
    "BatchJobRun",
    "CompanyHoliday",
    "Decision",
    "Employee",
    "EmployeeRole",
    "LeaveBalance",
    "LeavePolicy",
    "LeaveRequest",
    "LeaveType",
    "LeaveTypeName",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
]
