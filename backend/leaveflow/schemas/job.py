from __future__ import annotations

from pydantic import BaseModel


class BatchRunResponse(BaseModel):
    """Summary returned by the batch job triggers."""

    job_name: str
    period: str
    processed: int
    updated: int
    skipped: int
    errors: int
