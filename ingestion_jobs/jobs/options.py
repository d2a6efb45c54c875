"""Pipeline options builder translating a declarative job into backend options."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import sys
from types import MappingProxyType
from typing import Callable, Final, Mapping
from uuid import uuid4

from ingestion_jobs.domain import ImportOptions, Job, SpecsStreamingUpdateConfig, domain_spec_to_json

from .errors import OptionsBuildError

_STAGEABLE_ARCHIVE_SUFFIXES: Final[frozenset[str]] = frozenset({".zip", ".whl", ".egg", ".tar.gz"})


@dataclass(frozen=True)
class RunnerConfig:
    """Runner-level defaults fixed for the lifetime of a job manager.

    Attributes:
        project: Cloud project identifier.
        region: Execution region.
        zone: Worker zone.
        network: Worker network.
        subnetwork: Worker subnetwork.
        temp_location: Temporary storage location.
        labels: Labels attached to every submitted job.
        dead_letter_table_spec: Optional dead-letter destination.
        files_to_stage: Explicit staging list; discovered when empty.
    """

    project: str = ""
    region: str = ""
    zone: str = ""
    network: str = ""
    subnetwork: str = ""
    temp_location: str = ""
    labels: Mapping[str, str] = field(default_factory=dict)
    dead_letter_table_spec: str = ""
    files_to_stage: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "files_to_stage", tuple(self.files_to_stage))


@dataclass(frozen=True)
class MetricsConfig:
    """Global metrics configuration.

    Attributes:
        enabled: Whether jobs export metrics.
        host: Collector host.
        port: Collector port.
        exporter_type: Exporter kind, e.g. `statsd`.
    """

    enabled: bool = False
    host: str = ""
    port: int = 0
    exporter_type: str = ""


FilesToStageResolver = Callable[[RunnerConfig], tuple[str, ...]]


def job_options_build(
    job: Job,
    runner_config: RunnerConfig,
    metrics_config: MetricsConfig,
    specs_streaming_update_config: SpecsStreamingUpdateConfig,
    app_name: str = "JobManager",
    update: bool = False,
    files_to_stage_resolver: FilesToStageResolver | None = None,
) -> ImportOptions:
    """Build pipeline options for one job submission.

    Args:
        job: Declarative job with source, stores and feature sets attached.
        runner_config: Runner defaults copied verbatim into the options.
        metrics_config: Global metrics configuration.
        specs_streaming_update_config: Channel the job learns spec changes from.
        app_name: Name of the submitting component.
        update: Whether the submission replaces a running job in place.
        files_to_stage_resolver: Optional staging list resolver.

    Returns:
        ImportOptions: Options object with a fresh options id.

    Raises:
        OptionsBuildError: Raised when the job has no stores or the staging list is empty.
    """

    if not job.stores:
        raise OptionsBuildError(f"job {job.id} has no stores")

    resolver = files_to_stage_resolver or job_options_resolve_files_to_stage
    files_to_stage = tuple(resolver(runner_config))
    if not files_to_stage:
        raise OptionsBuildError(f"no files to stage could be determined for job {job.id}")

    statsd_host = ""
    statsd_port = 0
    metrics_exporter_type = ""
    if metrics_config.enabled:
        statsd_host = metrics_config.host
        statsd_port = metrics_config.port
        metrics_exporter_type = metrics_config.exporter_type

    return ImportOptions(
        runner=job.runner.value,
        project=runner_config.project,
        region=runner_config.region,
        zone=runner_config.zone,
        network=runner_config.network,
        subnetwork=runner_config.subnetwork,
        temp_location=runner_config.temp_location,
        labels=runner_config.labels,
        update=update,
        app_name=app_name,
        job_name=job.id,
        stores_json=tuple(domain_spec_to_json(store) for store in job.stores),
        source_json=domain_spec_to_json(job.source),
        specs_streaming_update_config_json=domain_spec_to_json(specs_streaming_update_config),
        options_id=str(uuid4()),
        dead_letter_table_spec=runner_config.dead_letter_table_spec,
        statsd_host=statsd_host,
        statsd_port=statsd_port,
        metrics_exporter_type=metrics_exporter_type,
        files_to_stage=files_to_stage,
    )


def job_options_resolve_files_to_stage(runner_config: RunnerConfig) -> tuple[str, ...]:
    """Resolve the artifacts a backend must stage to run the pipeline.

    An explicit list from the runner config wins. Otherwise the installed
    ingestion package directory is staged together with every archive entry
    on the interpreter path, in path order and without duplicates.

    Args:
        runner_config: Runner defaults.

    Returns:
        tuple[str, ...]: Absolute paths to stage.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if runner_config.files_to_stage:
        return tuple(runner_config.files_to_stage)

    discovered: list[str] = []
    package_directory = Path(__file__).resolve().parent.parent
    if package_directory.is_dir():
        discovered.append(str(package_directory))

    for path_entry in sys.path:
        if not path_entry:
            continue
        candidate = Path(path_entry)
        if not candidate.is_file():
            continue
        if not any(candidate.name.endswith(suffix) for suffix in _STAGEABLE_ARCHIVE_SUFFIXES):
            continue
        resolved_candidate = str(candidate.resolve())
        if resolved_candidate not in discovered:
            discovered.append(resolved_candidate)
    return tuple(discovered)
