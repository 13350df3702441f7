from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leaveflow import worker
from leaveflow.models.job_run import BatchJobRun

if TYPE_CHECKING:
    import pytest
    from sqlalchemy.ext.asyncio import AsyncEngine

    from conftest import Org


async def _runs(engine: AsyncEngine) -> set[tuple[str, str]]:
    async with AsyncSession(engine) as session:
        result = await session.execute(select(BatchJobRun))
        return {(run.job_name, run.period) for run in result.scalars().all()}


async def test_new_year_runs_both_jobs(engine: AsyncEngine, org: Org, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(worker, "get_session_factory", lambda: async_sessionmaker(engine, expire_on_commit=False))

    await worker.run_due_jobs(date(2027, 1, 1))

    assert await _runs(engine) == {("annual_carry_forward", "2027"), ("monthly_accrual", "2027-01")}


async def test_repeated_wakeups_are_harmless(engine: AsyncEngine, org: Org, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(worker, "get_session_factory", lambda: async_sessionmaker(engine, expire_on_commit=False))

    await worker.run_due_jobs(date(2026, 3, 1))
    await worker.run_due_jobs(date(2026, 3, 1))

    assert await _runs(engine) == {("monthly_accrual", "2026-03")}


async def test_nothing_due_mid_month(engine: AsyncEngine, org: Org, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(worker, "get_session_factory", lambda: async_sessionmaker(engine, expire_on_commit=False))

    await worker.run_due_jobs(date(2026, 3, 17))

    assert await _runs(engine) == set()
