"""Claim records that keep each batch job to a single run per period."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leaveflow.exceptions import JobAlreadyRunError
from leaveflow.models.job_run import BatchJobRun

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leaveflow.models.enums import BatchJobName

logger = logging.getLogger(__name__)


@dataclass
class BatchRunResult:
    """Summary of a batch job run."""

    job_name: str
    period: str
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0


async def claim_job_run(session: AsyncSession, job_name: BatchJobName, period: str) -> uuid.UUID:
    """Insert the (job, period) claim and commit it. Returns the run ID.

    Raises JobAlreadyRunError when the period has already been claimed.
    """
    run = BatchJobRun(job_name=job_name.value, period=period)
    run_id = run.id
    session.add(run)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise JobAlreadyRunError(f"{job_name.value} has already run for {period}") from None

    logger.info("Claimed %s for %s (run %s)", job_name.value, period, run_id)
    return run_id


async def complete_job_run(session: AsyncSession, run_id: uuid.UUID, result: BatchRunResult) -> None:
    """Record the outcome of a claimed run."""
    row = await session.execute(
        select(BatchJobRun).where(col(BatchJobRun.id) == run_id).execution_options(populate_existing=True)
    )
    run = row.scalar_one()
    run.completed_at = datetime.now(UTC)
    run.processed = result.processed
    run.updated = result.updated
    run.skipped = result.skipped
    run.errors = result.errors
    await session.commit()


async def release_job_run(session: AsyncSession, run_id: uuid.UUID) -> None:
    """Drop a claim whose run failed before changing any balance, so the period can be retried."""
    await session.rollback()
    await session.execute(delete(BatchJobRun).where(col(BatchJobRun.id) == run_id))
    await session.commit()
    logger.warning("Released batch job claim %s after a failed run", run_id)
