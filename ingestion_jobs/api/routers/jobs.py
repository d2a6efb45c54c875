"""Jobs API router composition for start, inspect, abort and restart endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ingestion_jobs.api.schemas import JobStartRequest, api_serialize_job
from ingestion_jobs.domain import JobStatus
from ingestion_jobs.jobs import JobExecutionException, JobFailureReason, JobManagerPort, JobRegistryPort


def api_create_jobs_router(job_manager: JobManagerPort, job_registry: JobRegistryPort) -> APIRouter:
    """Create jobs router backed by one job manager.

    Args:
        job_manager: Job manager for the configured runner.
        job_registry: Registry of jobs submitted through this process.

    Returns:
        APIRouter: Router exposing job lifecycle APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if job_manager is None:
        raise ValueError("job_manager must not be None")
    if job_registry is None:
        raise ValueError("job_registry must not be None")

    router = APIRouter(prefix="/jobs", tags=["jobs"])

    @router.post("")
    def api_job_start(request: JobStartRequest) -> JSONResponse:
        """Start one ingestion job.

        Args:
            request: Declarative job description.

        Returns:
            JSONResponse: Started job payload, 409 for active duplicates, 502 on backend failure.

        Raises:
            RuntimeError: Raised when execution fails unexpectedly.
        """

        try:
            job = request.request_to_job(runner=job_manager.job_runner_type())
        except ValueError as error:
            return _api_error_response(status.HTTP_400_BAD_REQUEST, "INVALID_JOB", str(error))

        with job_registry.registry_lock(job.id):
            existing_job = job_registry.registry_get(job.id)
            if existing_job is not None and existing_job.ext_id and not existing_job.job_is_terminal():
                return _api_error_response(
                    status.HTTP_409_CONFLICT,
                    "JOB_ALREADY_ACTIVE",
                    f"job {job.id} is already {existing_job.status.value}",
                )

            try:
                started_job = job_manager.job_start(job)
            except JobExecutionException as error:
                return _api_job_failure_response(error)

            job_registry.registry_save(started_job)
        return JSONResponse(content=api_serialize_job(started_job), status_code=status.HTTP_201_CREATED)

    @router.get("")
    def api_job_list() -> JSONResponse:
        """Return jobs submitted through this process ordered by id."""

        jobs = job_registry.registry_list()
        payload = {"items": [api_serialize_job(job) for job in jobs], "returned": len(jobs)}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/{job_id}")
    def api_job_detail(job_id: str) -> JSONResponse:
        """Return one job with its status refreshed from the backend.

        Args:
            job_id: Platform job id.

        Returns:
            JSONResponse: Job payload, 404 when absent, 502 when the backend query fails.

        Raises:
            RuntimeError: Raised when execution fails unexpectedly.
        """

        with job_registry.registry_lock(job_id):
            job = job_registry.registry_get(job_id)
            if job is None:
                return _api_error_response(status.HTTP_404_NOT_FOUND, "JOB_NOT_FOUND", "job not found")
            try:
                job.status = job_manager.job_get_status(job)
            except JobExecutionException as error:
                return _api_job_failure_response(error)
        return JSONResponse(content=api_serialize_job(job), status_code=status.HTTP_200_OK)

    @router.post("/{job_id}/abort")
    def api_job_abort(job_id: str) -> JSONResponse:
        """Request cancellation of one job."""

        with job_registry.registry_lock(job_id):
            job = job_registry.registry_get(job_id)
            if job is None:
                return _api_error_response(status.HTTP_404_NOT_FOUND, "JOB_NOT_FOUND", "job not found")
            if job.status in (JobStatus.ABORTING, JobStatus.ABORTED):
                return JSONResponse(content=api_serialize_job(job), status_code=status.HTTP_200_OK)
            try:
                aborted_job = job_manager.job_abort(job)
            except JobExecutionException as error:
                return _api_job_failure_response(error)
        return JSONResponse(content=api_serialize_job(aborted_job), status_code=status.HTTP_202_ACCEPTED)

    @router.post("/{job_id}/restart")
    def api_job_restart(job_id: str) -> JSONResponse:
        """Abort and resubmit one job."""

        with job_registry.registry_lock(job_id):
            job = job_registry.registry_get(job_id)
            if job is None:
                return _api_error_response(status.HTTP_404_NOT_FOUND, "JOB_NOT_FOUND", "job not found")
            try:
                restarted_job = job_manager.job_restart(job)
            except JobExecutionException as error:
                return _api_job_failure_response(error)
            job_registry.registry_save(restarted_job)
        return JSONResponse(content=api_serialize_job(restarted_job), status_code=status.HTTP_201_CREATED)

    return router


def _api_error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "status": "error",
        "code": code,
        "message": message,
    }
    return JSONResponse(content=payload, status_code=status_code)


def _api_job_failure_response(error: JobExecutionException) -> JSONResponse:
    """Render a job manager failure as a bad-gateway payload.

    Args:
        error: Job manager failure.

    Returns:
        JSONResponse: 409 for invalid job state, else 502 with failure reason.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    if error.reason == JobFailureReason.INVALID_JOB_STATE:
        status_code = status.HTTP_409_CONFLICT
    payload = {
        "status": "error",
        "code": error.reason.value,
        "message": str(error),
        "job_id": error.job_id,
    }
    return JSONResponse(content=payload, status_code=status_code)
