# ruff: noqa: B008, TC003
"""Scheduler triggers for the batch jobs."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from leaveflow.api.deps import require_scheduler
from leaveflow.db import SessionDep
from leaveflow.schemas.job import BatchRunResponse
from leaveflow.services.accrual import run_monthly_accrual
from leaveflow.services.carryforward import run_annual_carry_forward
from leaveflow.services.job_run import BatchRunResult

jobs_router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
    dependencies=[Depends(require_scheduler)],
)


def _to_response(result: BatchRunResult) -> BatchRunResponse:
    return BatchRunResponse(
        job_name=result.job_name,
        period=result.period,
        processed=result.processed,
        updated=result.updated,
        skipped=result.skipped,
        errors=result.errors,
    )


@jobs_router.post("/monthly-accrual", response_model=BatchRunResponse)
async def trigger_monthly_accrual(
    session: SessionDep,
    target_date: date | None = Query(default=None),
) -> BatchRunResponse:
    """Run the monthly accrual for the month of ``target_date`` (default today).

    Each month can run once; a second trigger returns 409.
    """
    return _to_response(await run_monthly_accrual(session, target_date))


@jobs_router.post("/annual-carry-forward", response_model=BatchRunResponse)
async def trigger_annual_carry_forward(
    session: SessionDep,
    target_date: date | None = Query(default=None),
) -> BatchRunResponse:
    """Reset non-carry-forward balances for the year of ``target_date`` (default today)."""
    return _to_response(await run_annual_carry_forward(session, target_date))
