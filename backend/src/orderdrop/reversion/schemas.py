"""Pydantic schemas for reversion sweep statistics."""

from datetime import datetime

from pydantic import BaseModel, Field


class ReversionStatistics(BaseModel):
    """Statistics from one reversion sweep.

    Candidates are the stale Completed-Reset-Requested requests found at the
    start of the sweep. Each ends up in exactly one of reverted, skipped
    (state changed concurrently), or errors.
    """

    job_started_at: datetime = Field(..., description="Sweep start time (UTC)")
    job_completed_at: datetime = Field(..., description="Sweep end time (UTC)")
    duration_seconds: float = Field(..., description="Total sweep duration")
    cutoff: datetime = Field(..., description="Requests last updated before this are stale")
    candidates: int = Field(default=0, ge=0, description="Stale requests found")
    reverted: int = Field(default=0, ge=0, description="Requests moved back to Completed")
    skipped: int = Field(default=0, ge=0, description="Requests whose state changed concurrently")
    errors: int = Field(default=0, ge=0, description="Requests that failed to update")

    @property
    def has_errors(self) -> bool:
        return self.errors > 0

    def to_task_result(self) -> dict:
        return {
            "status": "completed",
            "job_started_at": self.job_started_at.isoformat(),
            "job_completed_at": self.job_completed_at.isoformat(),
            "duration_seconds": self.duration_seconds,
            "cutoff": self.cutoff.isoformat(),
            "candidates": self.candidates,
            "reverted": self.reverted,
            "skipped": self.skipped,
            "errors": self.errors,
            "has_errors": self.has_errors,
        }
