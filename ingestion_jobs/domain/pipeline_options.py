"""Backend-neutral pipeline options object handed to execution backends."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import json
from types import MappingProxyType
from typing import Any, Mapping

from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class ImportOptions:
    """Immutable options for one ingestion job submission.

    Field names render as camelCase option names (`stores_json` becomes
    `storesJson`), matching the option parser of the ingestion pipeline.

    Attributes:
        runner: Runner identifier, e.g. `DataflowRunner`.
        project: Cloud project the job runs in.
        region: Region the job runs in.
        zone: Worker zone.
        network: Worker network.
        subnetwork: Worker subnetwork.
        temp_location: Temporary storage location.
        labels: Labels attached to the backend job.
        update: Whether the submission replaces an already running job in place.
        app_name: Name of the submitting component.
        job_name: Backend job display name, the platform job id.
        stores_json: One canonical store description per store.
        source_json: Canonical source description.
        specs_streaming_update_config_json: Canonical spec-update channel description.
        options_id: Unique identifier of this options object.
        dead_letter_table_spec: Dead-letter destination, empty unless configured.
        statsd_host: Metrics collector host, empty when metrics are disabled.
        statsd_port: Metrics collector port, zero when metrics are disabled.
        metrics_exporter_type: Metrics exporter kind, empty when metrics are disabled.
        files_to_stage: Artifacts the backend stages before execution.
    """

    runner: str
    project: str
    region: str
    zone: str
    network: str
    subnetwork: str
    temp_location: str
    labels: Mapping[str, str]
    update: bool
    app_name: str
    job_name: str
    stores_json: tuple[str, ...]
    source_json: str
    specs_streaming_update_config_json: str
    options_id: str
    dead_letter_table_spec: str = ""
    statsd_host: str = ""
    statsd_port: int = 0
    metrics_exporter_type: str = ""
    files_to_stage: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))
        object.__setattr__(self, "stores_json", tuple(self.stores_json))
        object.__setattr__(self, "files_to_stage", tuple(self.files_to_stage))

    def options_to_dict(self) -> dict[str, Any]:
        """Return the camelCase option map.

        Returns:
            dict[str, Any]: Option name to plain JSON-compatible value.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        payload: dict[str, Any] = {}
        for option_field in fields(self):
            value = getattr(self, option_field.name)
            if isinstance(value, Mapping):
                value = dict(value)
            elif isinstance(value, tuple):
                value = list(value)
            payload[to_camel(option_field.name)] = value
        return payload

    def options_to_args(self) -> list[str]:
        """Render options as `--name=value` command-line arguments.

        Empty strings are skipped; lists and maps are rendered as JSON.

        Returns:
            list[str]: Argument list in field declaration order.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        arguments: list[str] = []
        for option_name, value in self.options_to_dict().items():
            if value == "":
                continue
            if isinstance(value, (list, dict)):
                rendered_value = json.dumps(value, separators=(",", ":"))
            elif isinstance(value, bool):
                rendered_value = "true" if value else "false"
            else:
                rendered_value = str(value)
            arguments.append(f"--{option_name}={rendered_value}")
        return arguments

    def options_without_identity(self) -> dict[str, Any]:
        """Return the option map without the per-call options identifier."""

        payload = self.options_to_dict()
        payload.pop("optionsId")
        return payload
