"""In-memory registry of running translation jobs and their abort signals."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional
from uuid import UUID, uuid4

from translator.progress import AbortSignal

logger = logging.getLogger(__name__)


@dataclass
class RegisteredJob:
    """A running job as seen by the API."""

    job_id: UUID
    abort_signal: AbortSignal
    task: Optional["asyncio.Task[None]"] = None


class JobRegistry:
    """Tracks jobs so that a separate request can cancel them."""

    def __init__(self) -> None:
        self._jobs: Dict[UUID, RegisteredJob] = {}

    def register(self) -> RegisteredJob:
        job = RegisteredJob(job_id=uuid4(), abort_signal=AbortSignal())
        self._jobs[job.job_id] = job
        logger.debug(f"Registered job {job.job_id}")
        return job

    def get(self, job_id: UUID) -> Optional[RegisteredJob]:
        return self._jobs.get(job_id)

    def cancel(self, job_id: UUID) -> bool:
        """
        Request cancellation of a job.

        Returns:
            True if the job exists, False otherwise
        """
        job = self._jobs.get(job_id)
        if job is None:
            return False
        job.abort_signal.abort()
        logger.info(f"🛑 Cancellation requested for job {job_id}")
        return True

    def cancel_all(self) -> None:
        for job_id in list(self._jobs):
            self.cancel(job_id)

    def remove(self, job_id: UUID) -> None:
        self._jobs.pop(job_id, None)

    def __len__(self) -> int:
        return len(self._jobs)


job_registry = JobRegistry()
