# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leaveflow.models.base import TimestampMixin, UUIDBase


class ApprovalFlowEntry(UUIDBase, TimestampMixin, table=True):
    """One audited decision or forward record for a leave request."""

    __tablename__ = "approval_flow_entry"
    __table_args__ = (sa.Index("ix_approval_flow_request_approver", "leave_request_id", "approver_id"),)

    leave_request_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_request.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    approver_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    step: int = Field(default=1)
    status: str = Field(max_length=50)
    remarks: str | None = None
