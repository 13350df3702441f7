# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leaveflow.models.base import UUIDBase, now_utc


class BatchJobRun(UUIDBase, table=True):
    """Claim record that keeps a batch job to one run per period."""

    __tablename__ = "batch_job_run"
    __table_args__ = (sa.UniqueConstraint("job_name", "period", name="uq_batch_job_period"),)

    job_name: str = Field(max_length=50)
    period: str = Field(max_length=20)
    started_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
    )
    completed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
