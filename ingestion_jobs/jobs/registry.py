"""In-process job registry backing the HTTP surface."""

from __future__ import annotations

import threading
from typing import ContextManager, Protocol

from ingestion_jobs.domain import Job


class JobRegistryPort(Protocol):
    """Port definition for looking up jobs submitted through this process."""

    def registry_save(self, job: Job) -> None:
        """Insert or replace the record for `job.id`.

        Args:
            job: Job record.

        Returns:
            None: Record is stored as side effect.

        Raises:
            RuntimeError: Raised when the record cannot be stored.
        """

    def registry_get(self, job_id: str) -> Job | None:
        """Return the job with the given id, or None."""

    def registry_list(self) -> list[Job]:
        """Return all jobs ordered by id."""

    def registry_lock(self, job_id: str) -> ContextManager[object]:
        """Return the lock serializing lifecycle calls for one job id.

        Args:
            job_id: Platform job id.

        Returns:
            ContextManager[object]: Lock held while a caller checks and submits the job.

        Raises:
            RuntimeError: Raised when the lock cannot be provided.
        """


class InMemoryJobRegistry(JobRegistryPort):
    """Lock-guarded dictionary of job records keyed by job id.

    Records are lost when the process exits.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._job_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def registry_save(self, job: Job) -> None:
        with self._lock:
            self._jobs[job.id] = job

    def registry_get(self, job_id: str) -> Job | None:
        with self._lock:
            return self._jobs.get(job_id.strip())

    def registry_list(self) -> list[Job]:
        with self._lock:
            return [self._jobs[job_id] for job_id in sorted(self._jobs)]

    def registry_lock(self, job_id: str) -> threading.Lock:
        normalized_job_id = job_id.strip()
        with self._lock:
            return self._job_locks.setdefault(normalized_job_id, threading.Lock())
