from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from leaveflow.models.audit import AuditLog
from leaveflow.models.enums import AuditAction, AuditEntityType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leaveflow.models.approval import ApprovalFlowEntry
    from leaveflow.models.request import LeaveRequest

# Lifecycle fields of a leave request; dates and reason never change after submit.
REQUEST_STATE_FIELDS = ("status", "approver_id", "rejection_reason", "decided_at")


def _json_safe(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def request_snapshot(leave_request: LeaveRequest, *, full: bool = False) -> dict[str, Any]:
    """JSON-safe view of a request for the audit log.

    ``full`` captures every column (used on submit); otherwise only the
    fields a decision or cancellation can change.
    """
    data = leave_request.model_dump()
    if not full:
        data = {key: data[key] for key in REQUEST_STATE_FIELDS}
    return {key: _json_safe(value) for key, value in data.items()}


def flow_entry_snapshot(entry: ApprovalFlowEntry) -> dict[str, Any]:
    return {key: _json_safe(value) for key, value in entry.model_dump().items()}


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID | None,
    entity_type: AuditEntityType,
    entity_id: uuid.UUID,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit entry to the caller's transaction.

    ``actor_id`` is None for batch jobs.
    """
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def write_purge_log(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    leave_request_id: uuid.UUID,
    entries: Sequence[ApprovalFlowEntry],
) -> AuditLog:
    """Preserve approval flow entries that are about to be deleted."""
    return await write_audit_log(
        session,
        actor_id=actor_id,
        entity_type=AuditEntityType.APPROVAL_FLOW,
        entity_id=leave_request_id,
        action=AuditAction.PURGE,
        before_json={"entries": [flow_entry_snapshot(e) for e in entries]},
    )
