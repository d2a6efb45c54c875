"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from ingestion_jobs.adapters import BackendAdapterPort, DataflowRestAdapter, DirectRunnerAdapter
from ingestion_jobs.api import create_api_application
from ingestion_jobs.config import (
    AppSettings,
    config_build_metrics_config,
    config_build_runner_config,
    config_build_specs_streaming_update_config,
    config_load_settings,
)
from ingestion_jobs.domain import Runner
from ingestion_jobs.jobs import JobManager


def bootstrap_create_backend_adapter(settings: AppSettings) -> BackendAdapterPort:
    """Select and build the backend adapter for the configured runner.

    Args:
        settings: Validated runtime settings.

    Returns:
        BackendAdapterPort: Adapter for `settings.runner`.

    Raises:
        ValueError: Raised when the runner has no adapter.
    """

    if settings.runner == Runner.DATAFLOW:
        access_token = settings.dataflow_access_token
        return DataflowRestAdapter(
            project=settings.dataflow_project,
            region=settings.dataflow_region,
            token_provider=lambda: access_token,
            base_url=settings.dataflow_api_base_url,
            request_timeout_seconds=settings.dataflow_request_timeout_seconds,
        )
    if settings.runner == Runner.DIRECT:
        return DirectRunnerAdapter(pipeline_command=settings.direct_runner_command)
    raise ValueError(f"unsupported runner={settings.runner}")


def bootstrap_create_job_manager(settings: AppSettings | None = None) -> JobManager:
    """Build the job manager for the configured runner.

    Args:
        settings: Optional preloaded settings; loaded from the environment when None.

    Returns:
        JobManager: Fully wired job manager.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    return JobManager(
        backend_adapter=bootstrap_create_backend_adapter(resolved_settings),
        runner_config=config_build_runner_config(resolved_settings),
        metrics_config=config_build_metrics_config(resolved_settings),
        specs_streaming_update_config=config_build_specs_streaming_update_config(resolved_settings),
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    return create_api_application(
        settings=resolved_settings,
        job_manager=bootstrap_create_job_manager(resolved_settings),
    )
