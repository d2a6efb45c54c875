"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ingestion_jobs.domain import KafkaSourceConfig, Runner, SpecsStreamingUpdateConfig
from ingestion_jobs.jobs import MetricsConfig, RunnerConfig


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for the job manager runtime.

    Environment variable names map directly to field names in uppercase.
    Example: `dataflow_project` reads from `DATAFLOW_PROJECT`. List and map
    fields are read as JSON.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Root log level.
        runner: Runner jobs are submitted to (`DataflowRunner` or `DirectRunner`).
        dataflow_project: Cloud project for managed jobs.
        dataflow_region: Region for managed jobs.
        dataflow_zone: Worker zone.
        dataflow_network: Worker network.
        dataflow_subnetwork: Worker subnetwork.
        dataflow_temp_location: Temporary storage location.
        dataflow_labels: Labels attached to every job.
        dataflow_api_base_url: Managed service root URL.
        dataflow_access_token: Bearer token for the managed service.
        dataflow_request_timeout_seconds: HTTP timeout per backend request.
        dead_letter_table_spec: Optional dead-letter destination.
        files_to_stage: Explicit staging list, discovered when empty.
        direct_runner_command: Command prefix launching a local pipeline.
        metrics_enabled: Whether jobs export metrics.
        metrics_host: Metrics collector host.
        metrics_port: Metrics collector port.
        metrics_exporter_type: Metrics exporter kind.
        specs_bootstrap_servers: Brokers of the spec-update topic.
        specs_topic: Topic jobs read spec updates from.
        specs_ack_topic: Topic jobs acknowledge spec updates on.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    runner: Runner = Field(default=Runner.DIRECT)
    dataflow_project: str = Field(default="")
    dataflow_region: str = Field(default="")
    dataflow_zone: str = Field(default="")
    dataflow_network: str = Field(default="")
    dataflow_subnetwork: str = Field(default="")
    dataflow_temp_location: str = Field(default="")
    dataflow_labels: dict[str, str] = Field(default_factory=dict)
    dataflow_api_base_url: str = Field(default="https://dataflow.googleapis.com")
    dataflow_access_token: str = Field(default="")
    dataflow_request_timeout_seconds: float = Field(default=30.0, gt=0)
    dead_letter_table_spec: str = Field(default="")
    files_to_stage: list[str] = Field(default_factory=list)
    direct_runner_command: list[str] = Field(default_factory=lambda: ["python", "-m", "ingestion_pipeline"])
    metrics_enabled: bool = Field(default=False)
    metrics_host: str = Field(default="localhost")
    metrics_port: int = Field(default=9125, ge=0, le=65535)
    metrics_exporter_type: str = Field(default="statsd")
    specs_bootstrap_servers: str = Field(default="localhost:9092", min_length=1)
    specs_topic: str = Field(default="feature-set-specs", min_length=1)
    specs_ack_topic: str = Field(default="feature-set-specs-ack")

    @field_validator("runner", mode="before")
    @classmethod
    def _validate_runner(cls, value: object) -> object:
        if isinstance(value, str):
            return Runner.runner_from_name(value)
        return value

    @field_validator("specs_bootstrap_servers", "specs_topic")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("direct_runner_command")
    @classmethod
    def _validate_command(cls, value: list[str]) -> list[str]:
        if not [part for part in value if part.strip()]:
            raise ValueError("direct_runner_command must not be empty")
        return value

    @model_validator(mode="after")
    def _validate_runner_requirements(self) -> "AppSettings":
        if self.runner != Runner.DATAFLOW:
            return self
        missing_fields = [
            field_name
            for field_name in ("dataflow_project", "dataflow_region", "dataflow_temp_location", "dataflow_access_token")
            if not getattr(self, field_name).strip()
        ]
        if missing_fields:
            raise ValueError(f"DataflowRunner requires: {', '.join(missing_fields)}")
        return self


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error


def config_build_runner_config(settings: AppSettings) -> RunnerConfig:
    """Build immutable runner defaults from settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        RunnerConfig: Runner defaults for the job manager.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return RunnerConfig(
        project=settings.dataflow_project,
        region=settings.dataflow_region,
        zone=settings.dataflow_zone,
        network=settings.dataflow_network,
        subnetwork=settings.dataflow_subnetwork,
        temp_location=settings.dataflow_temp_location,
        labels=settings.dataflow_labels,
        dead_letter_table_spec=settings.dead_letter_table_spec,
        files_to_stage=tuple(settings.files_to_stage),
    )


def config_build_metrics_config(settings: AppSettings) -> MetricsConfig:
    """Build the global metrics configuration from settings."""

    return MetricsConfig(
        enabled=settings.metrics_enabled,
        host=settings.metrics_host,
        port=settings.metrics_port,
        exporter_type=settings.metrics_exporter_type,
    )


def config_build_specs_streaming_update_config(settings: AppSettings) -> SpecsStreamingUpdateConfig:
    """Build the spec-update channel descriptor from settings."""

    return SpecsStreamingUpdateConfig(
        source=KafkaSourceConfig(
            bootstrap_servers=settings.specs_bootstrap_servers,
            topic=settings.specs_topic,
        ),
        ack_topic=settings.specs_ack_topic,
    )
