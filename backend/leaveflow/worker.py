"""Worker process for the scheduled batch jobs.

Wakes up every ``worker_interval_seconds``. On Jan 1 it runs the annual
carry-forward, and on ``accrual_day_of_month`` it runs the monthly accrual.
Each job claims its period, so repeated wake-ups on the same day and several
worker replicas sharing one database still run each job once.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from leaveflow.config import get_settings
from leaveflow.db import get_session_factory
from leaveflow.exceptions import JobAlreadyRunError

logger = logging.getLogger(__name__)


async def run_due_jobs(today: date) -> None:
    """Run whichever batch jobs are due on ``today``.

    Carry-forward runs before accrual so January's accrual is not wiped by the
    year-end reset.
    """
    from leaveflow.services.accrual import run_monthly_accrual
    from leaveflow.services.carryforward import run_annual_carry_forward

    settings = get_settings()
    session_factory = get_session_factory()

    if today.month == 1 and today.day == 1:
        try:
            async with session_factory() as session:
                result = await run_annual_carry_forward(session, today)
            logger.info(
                "Carry-forward run for %s: processed=%d updated=%d errors=%d",
                today,
                result.processed,
                result.updated,
                result.errors,
            )
        except JobAlreadyRunError:
            logger.info("Carry-forward already ran for %s", today.year)
        except Exception:
            logger.exception("Carry-forward run failed for %s", today)

    if today.day == settings.accrual_day_of_month:
        try:
            async with session_factory() as session:
                result = await run_monthly_accrual(session, today)
            logger.info(
                "Accrual run for %s: processed=%d updated=%d skipped=%d errors=%d",
                today,
                result.processed,
                result.updated,
                result.skipped,
                result.errors,
            )
        except JobAlreadyRunError:
            logger.info("Monthly accrual already ran for %s", today.strftime("%Y-%m"))
        except Exception:
            logger.exception("Accrual run failed for %s", today)


async def run_worker_loop() -> None:
    """Main worker loop."""
    interval = get_settings().worker_interval_seconds
    logger.info("Batch worker started (interval %ds)", interval)

    while True:
        await run_due_jobs(date.today())
        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(run_worker_loop())


if __name__ == "__main__":
    main()
