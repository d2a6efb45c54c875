"""Job manager submitting ingestion jobs to one execution backend."""

from __future__ import annotations

import logging

from ingestion_jobs.adapters import BackendAdapterError, BackendAdapterPort
from ingestion_jobs.domain import (
    JOB_STATUS_TERMINAL_FAILURE,
    Job,
    JobStatus,
    Runner,
    SpecsStreamingUpdateConfig,
)

from .errors import JobExecutionException, JobFailureReason, OptionsBuildError
from .interfaces import JobManagerPort
from .options import FilesToStageResolver, MetricsConfig, RunnerConfig, job_options_build
from .status_translation import job_status_translate

logger = logging.getLogger(__name__)

# Errors a backend round-trip may surface; anything else is a programming error.
_BACKEND_FAILURES = (BackendAdapterError, ConnectionError, TimeoutError, OSError, ValueError, LookupError)


class JobManager(JobManagerPort):
    """Concrete job manager for one runner.

    Configuration is fixed at construction and never mutated afterwards, so a
    single instance can serve concurrent callers. Calls for the same job id
    must be serialized by the caller.
    """

    def __init__(
        self,
        backend_adapter: BackendAdapterPort,
        runner_config: RunnerConfig,
        metrics_config: MetricsConfig,
        specs_streaming_update_config: SpecsStreamingUpdateConfig,
        files_to_stage_resolver: FilesToStageResolver | None = None,
    ):
        """Initialize job manager dependencies.

        Args:
            backend_adapter: Adapter for the runner jobs are submitted to.
            runner_config: Runner defaults copied into every submission.
            metrics_config: Global metrics configuration.
            specs_streaming_update_config: Channel jobs learn spec changes from.
            files_to_stage_resolver: Optional staging list resolver.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if backend_adapter is None:
            raise ValueError("backend_adapter must not be None")
        if runner_config is None:
            raise ValueError("runner_config must not be None")
        if metrics_config is None:
            raise ValueError("metrics_config must not be None")
        if specs_streaming_update_config is None:
            raise ValueError("specs_streaming_update_config must not be None")

        self._backend_adapter = backend_adapter
        self._runner = backend_adapter.adapter_runner()
        self._runner_config = runner_config
        self._metrics_config = metrics_config
        self._specs_streaming_update_config = specs_streaming_update_config
        self._files_to_stage_resolver = files_to_stage_resolver
        self._app_name = f"{self._runner.name.title()}JobManager"

    def job_runner_type(self) -> Runner:
        """Return the runner this manager submits to."""

        return self._runner

    def job_start(self, job: Job) -> Job:
        """Submit a job for the first time.

        Args:
            job: Job to submit; mutated in place on success only.

        Returns:
            Job: The same job with `ext_id` and translated `status` set.

        Raises:
            JobExecutionException: Raised when the job was already submitted, the submission fails or the job
                is dead on arrival.
        """

        if job.ext_id:
            raise JobExecutionException(
                f"job {job.id} was already submitted as {job.ext_id}",
                job_id=job.id,
                reason=JobFailureReason.INVALID_JOB_STATE,
                ext_id=job.ext_id,
            )
        return self._job_submit(job=job, update=False)

    def job_update(self, job: Job) -> Job:
        """Replace a running job in place with the job's current definition.

        Args:
            job: Previously submitted job.

        Returns:
            Job: The job carrying the replacement's external id and status.

        Raises:
            JobExecutionException: Raised when the job was never submitted or the update fails.
        """

        if not job.ext_id:
            raise JobExecutionException(
                f"job {job.id} cannot be updated before it is submitted",
                job_id=job.id,
                reason=JobFailureReason.INVALID_JOB_STATE,
            )
        # The replacement gets its own external id.
        replacement = job.job_clone_unsubmitted()
        self._job_submit(job=replacement, update=True)
        job.ext_id = replacement.ext_id
        job.status = replacement.status
        return job

    def job_abort(self, job: Job) -> Job:
        """Request cancellation of a submitted job.

        Args:
            job: Previously submitted job.

        Returns:
            Job: The job with status `ABORTING`.

        Raises:
            JobExecutionException: Raised when the job has no external id or cancellation fails.
        """

        if not job.ext_id:
            raise JobExecutionException(
                f"job {job.id} has no external id to abort",
                job_id=job.id,
                reason=JobFailureReason.INVALID_JOB_STATE,
            )
        try:
            self._backend_adapter.adapter_cancel(job.ext_id)
        except _BACKEND_FAILURES as error:
            logger.warning("abort failed job_id=%s ext_id=%s error=%s", job.id, job.ext_id, error)
            raise JobExecutionException(
                f"unable to abort job {job.id}: {error}",
                job_id=job.id,
                reason=JobFailureReason.ABORT_FAILURE,
                ext_id=job.ext_id,
            ) from error

        job.status = JobStatus.ABORTING
        logger.info("abort requested job_id=%s ext_id=%s", job.id, job.ext_id)
        return job

    def job_restart(self, job: Job) -> Job:
        """Abort a job unless it already terminated, then submit it afresh.

        Args:
            job: Previously submitted job.

        Returns:
            Job: New job record with the fresh submission's external id and status.

        Raises:
            JobExecutionException: Raised when the abort or the new submission fails.
        """

        if job.ext_id and not job.job_is_terminal():
            self.job_abort(job)
        return self.job_start(job.job_clone_unsubmitted())

    def job_get_status(self, job: Job) -> JobStatus:
        """Query the backend for a job's current platform status.

        Args:
            job: Job to inspect.

        Returns:
            JobStatus: Translated status, or the job's own status when never submitted.

        Raises:
            JobExecutionException: Raised when the backend query fails.
        """

        if not job.ext_id:
            return job.status
        try:
            native_state = self._backend_adapter.adapter_query_state(job.ext_id)
        except _BACKEND_FAILURES as error:
            raise JobExecutionException(
                f"unable to query status of job {job.id}: {error}",
                job_id=job.id,
                reason=JobFailureReason.STATUS_QUERY_FAILURE,
                ext_id=job.ext_id,
            ) from error
        return job_status_translate(native_state)

    def _job_submit(self, job: Job, update: bool) -> Job:
        """Build options, submit once and apply the translated result.

        Args:
            job: Job to submit.
            update: Whether the submission replaces a running job.

        Returns:
            Job: Mutated job.

        Raises:
            JobExecutionException: Raised on build failure, submission failure or dead-on-arrival.
        """

        try:
            options = job_options_build(
                job=job,
                runner_config=self._runner_config,
                metrics_config=self._metrics_config,
                specs_streaming_update_config=self._specs_streaming_update_config,
                app_name=self._app_name,
                update=update,
                files_to_stage_resolver=self._files_to_stage_resolver,
            )
        except (OptionsBuildError, OSError) as error:
            raise JobExecutionException(
                f"unable to build options for job {job.id}: {error}",
                job_id=job.id,
                reason=JobFailureReason.SUBMISSION_FAILURE,
            ) from error

        try:
            submit_result = self._backend_adapter.adapter_submit(options)
        except _BACKEND_FAILURES as error:
            logger.warning("submission failed job_id=%s runner=%s error=%s", job.id, self._runner.value, error)
            raise JobExecutionException(
                f"unable to submit job {job.id}: {error}",
                job_id=job.id,
                reason=JobFailureReason.SUBMISSION_FAILURE,
            ) from error

        if not submit_result.external_job_id.strip():
            raise JobExecutionException(
                f"backend returned no external id for job {job.id}",
                job_id=job.id,
                reason=JobFailureReason.SUBMISSION_FAILURE,
            )

        status = job_status_translate(submit_result.native_state)
        if status in JOB_STATUS_TERMINAL_FAILURE:
            logger.warning(
                "job dead on arrival job_id=%s ext_id=%s native_state=%s",
                job.id,
                submit_result.external_job_id,
                submit_result.native_state,
            )
            raise JobExecutionException(
                f"job {job.id} reached terminal state {status.value} at submission",
                job_id=job.id,
                reason=JobFailureReason.DEAD_ON_ARRIVAL,
                native_state=submit_result.native_state,
            )

        job.job_mark_submitted(ext_id=submit_result.external_job_id, status=status)
        logger.info("job submitted job_id=%s ext_id=%s status=%s", job.id, job.ext_id, status.value)
        return job
