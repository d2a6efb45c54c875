"""FastAPI application factory for the job manager service."""

from fastapi import FastAPI

from ingestion_jobs.config import AppSettings
from ingestion_jobs.jobs import InMemoryJobRegistry, JobManagerPort, JobRegistryPort

from .routers import api_create_health_router, api_create_jobs_router


def create_api_application(
    settings: AppSettings,
    job_manager: JobManagerPort,
    job_registry: JobRegistryPort | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        job_manager: Job manager for the configured runner.
        job_registry: Optional registry, in-memory by default.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when the job manager is missing.
    """
    application = FastAPI(title="Ingestion Job Manager")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service metadata."""

        return {
            "service": "ingestion-jobs",
            "runner": job_manager.job_runner_type().value,
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(job_manager=job_manager))
    application.include_router(
        api_create_jobs_router(
            job_manager=job_manager,
            job_registry=job_registry or InMemoryJobRegistry(),
        )
    )

    return application
