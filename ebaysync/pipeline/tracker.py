"""
In-memory job tracking for the auto-listing pipeline.

Jobs are held in a bounded store. When full, the oldest created job is
evicted (strict FIFO by creation, not by access).
"""

import itertools
import logging
import threading
import time
from collections import deque
from typing import Deque, Dict, List, Optional, Union

from ..config import settings
from ..db.models import utcnow
from .models import JobStatus, PipelineJob, StepName, StepStatus

logger = logging.getLogger(__name__)


MAX_JOBS = 200


class PipelineJobTracker:
    """
    Thread-safe bounded store of pipeline jobs.

    Creation and eviction happen under the store lock. Step updates take a
    per-job lock, so updates to different jobs do not block each other.
    """

    def __init__(self, max_jobs: int = MAX_JOBS):
        if max_jobs < 1:
            raise ValueError("max_jobs must be at least 1")
        self.max_jobs = max_jobs
        self._lock = threading.Lock()
        self._jobs: Dict[str, PipelineJob] = {}
        self._job_locks: Dict[str, threading.Lock] = {}
        self._order: Deque[str] = deque()  # job ids, oldest first
        self._sequence = itertools.count(1)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _new_id(self) -> str:
        millis = time.time_ns() // 1_000_000
        return f"job_{millis}_{next(self._sequence):06d}"

    def create_job(self, product_id: str) -> str:
        """Create a queued job with all steps pending and return its ID."""
        with self._lock:
            job_id = self._new_id()

            while len(self._order) >= self.max_jobs:
                oldest = self._order.popleft()
                self._jobs.pop(oldest, None)
                self._job_locks.pop(oldest, None)
                logger.debug(f"Evicted pipeline job {oldest}")

            self._jobs[job_id] = PipelineJob(id=job_id, product_id=str(product_id))
            self._job_locks[job_id] = threading.Lock()
            self._order.append(job_id)

        logger.info(f"Created pipeline job {job_id} for product {product_id}")
        return job_id

    def _lookup(self, job_id: str):
        with self._lock:
            return self._jobs.get(job_id), self._job_locks.get(job_id)

    def start_job(self, job_id: str) -> None:
        """Mark a job as processing. Unknown IDs are ignored."""
        job, job_lock = self._lookup(job_id)
        if job is None:
            return

        with job_lock:
            job.status = JobStatus.PROCESSING
            job.updated_at = utcnow()

    def update_step(
        self,
        job_id: str,
        step_name: Union[StepName, str],
        status: Union[StepStatus, str],
        result: Optional[str] = None
    ) -> None:
        """
        Update one step of a job and re-derive the job status.

        Unknown job IDs and step names are ignored.

        Raises:
            ValueError: If status is not a valid step status
        """
        status = StepStatus(status)

        job, job_lock = self._lookup(job_id)
        if job is None:
            return

        with job_lock:
            name = step_name.value if isinstance(step_name, StepName) else str(step_name)
            step = next((s for s in job.steps if s.name.value == name), None)
            if step is None:
                return

            now = utcnow()
            step.status = status
            if status == StepStatus.RUNNING:
                step.started_at = now
            if status in (StepStatus.DONE, StepStatus.ERROR):
                step.completed_at = now
            if result is not None:
                step.result = result

            job.status = job.derive_status()
            job.updated_at = now

    def get_jobs(self) -> List[PipelineJob]:
        """All jobs, most recently created first."""
        with self._lock:
            entries = [(self._jobs[job_id], self._job_locks[job_id]) for job_id in reversed(self._order)]

        jobs = []
        for job, job_lock in entries:
            with job_lock:
                jobs.append(job.model_copy(deep=True))
        return jobs

    def get_job(self, job_id: str) -> Optional[PipelineJob]:
        """A snapshot of one job, or None if unknown or evicted."""
        job, job_lock = self._lookup(job_id)
        if job is None:
            return None
        with job_lock:
            return job.model_copy(deep=True)

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()
            self._job_locks.clear()
            self._order.clear()


# Process-wide tracker used by the API and the listing automation
tracker = PipelineJobTracker(settings.pipeline_max_jobs)


def create_pipeline_job(product_id: str) -> str:
    return tracker.create_job(product_id)


def start_pipeline_job(job_id: str) -> None:
    tracker.start_job(job_id)


def update_pipeline_step(
    job_id: str,
    step_name: Union[StepName, str],
    status: Union[StepStatus, str],
    result: Optional[str] = None
) -> None:
    tracker.update_step(job_id, step_name, status, result)


def get_pipeline_jobs() -> List[PipelineJob]:
    return tracker.get_jobs()


def get_pipeline_job(job_id: str) -> Optional[PipelineJob]:
    return tracker.get_job(job_id)
