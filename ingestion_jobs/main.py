"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or submits one job description from a file.
"""

import argparse
import json
import logging
from pathlib import Path

import uvicorn

from ingestion_jobs.api.schemas import JobStartRequest, api_serialize_job
from ingestion_jobs.bootstrap import bootstrap_create_application, bootstrap_create_job_manager
from ingestion_jobs.config import config_load_settings
from ingestion_jobs.jobs import JobExecutionException
from ingestion_jobs.logging_config import logging_configure

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when a job cannot be started.
    """

    argument_parser = argparse.ArgumentParser(description="Ingestion job manager runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "start-job"),
        help="Runtime command: `api` starts server, `start-job` submits one job description",
        type=str,
    )
    argument_parser.add_argument(
        "--job-file",
        dest="job_file",
        type=Path,
        help="Path to a JSON job description for `start-job`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging_configure(settings.log_level)

    if parsed_arguments.command == "start-job":
        if parsed_arguments.job_file is None:
            argument_parser.error("--job-file is required for start-job")
        main_start_job(job_file=parsed_arguments.job_file)
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_start_job(job_file: Path) -> None:
    """Submit one job description and print the resulting job record.

    Args:
        job_file: Path to a JSON job description.

    Returns:
        None: Prints the started job to stdout as side effect.

    Raises:
        SystemExit: Raised with status 2 for invalid descriptions and 1 when the job cannot be started.
    """

    job_manager = bootstrap_create_job_manager()
    try:
        request = JobStartRequest.model_validate_json(job_file.read_text(encoding="utf-8"))
        job = request.request_to_job(runner=job_manager.job_runner_type())
    except ValueError as error:
        logger.error("job description %s is invalid: %s", job_file, error)
        raise SystemExit(2) from error
    try:
        started_job = job_manager.job_start(job)
    except JobExecutionException as error:
        logger.error("job %s was not started: %s (%s)", error.job_id, error, error.reason.value)
        raise SystemExit(1) from error
    print(json.dumps(api_serialize_job(started_job), indent=2))


if __name__ == "__main__":
    main()
