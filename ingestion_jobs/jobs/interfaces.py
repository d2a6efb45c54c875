"""Typed interfaces for job-layer lifecycle responsibilities."""

from typing import Protocol

from ingestion_jobs.domain import Job, JobStatus, Runner


class JobManagerPort(Protocol):
    """Port definition for starting and tracking ingestion jobs on one runner."""

    def job_runner_type(self) -> Runner:
        """Return the runner this manager submits to.

        Returns:
            Runner: Runner identifier.

        Raises:
            RuntimeError: Raised when runner metadata is unavailable.
        """

    def job_start(self, job: Job) -> Job:
        """Submit a job and return it with external id and status set.

        Args:
            job: Pending job.

        Returns:
            Job: Submitted job.

        Raises:
            JobExecutionException: Raised when the job cannot be started healthy.
        """

    def job_update(self, job: Job) -> Job:
        """Replace a running job in place.

        Args:
            job: Submitted job.

        Returns:
            Job: Job carrying the replacement's identity.

        Raises:
            JobExecutionException: Raised when the update fails.
        """

    def job_abort(self, job: Job) -> Job:
        """Request cancellation of a submitted job.

        Args:
            job: Submitted job.

        Returns:
            Job: Job with status `ABORTING`.

        Raises:
            JobExecutionException: Raised when cancellation fails.
        """

    def job_restart(self, job: Job) -> Job:
        """Abort and resubmit a job.

        Args:
            job: Submitted job.

        Returns:
            Job: Freshly submitted job.

        Raises:
            JobExecutionException: Raised when the abort or resubmission fails.
        """

    def job_get_status(self, job: Job) -> JobStatus:
        """Return the job's current platform status.

        Args:
            job: Job to inspect.

        Returns:
            JobStatus: Current status.

        Raises:
            JobExecutionException: Raised when the backend query fails.
        """
