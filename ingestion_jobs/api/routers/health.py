"""Health endpoint router composition for app and runner checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ingestion_jobs.jobs import JobManagerPort


def api_create_health_router(job_manager: JobManagerPort) -> APIRouter:
    """Create health-check router reporting the configured runner.

    Args:
        job_manager: Job manager serving this process.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when job_manager is invalid.
    """

    if job_manager is None:
        raise ValueError("job_manager must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application health state."""

        payload = {
            "status": "ok",
            "app": "up",
            "runner": job_manager.job_runner_type().value,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
