"""Typed job records shared across runtime layers.

A `Job` is created in memory with `PENDING` status, handed to a job manager
and mutated in place when the runner accepts it. One caller owns a job at a
time; the models do no locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from .specs import FeatureSet, Source, Store


class JobStatus(str, Enum):
    """Platform-level ingestion job lifecycle state."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    ABORTING = "ABORTING"
    ABORTED = "ABORTED"
    ERROR = "ERROR"
    COMPLETED = "COMPLETED"
    SUSPENDED = "SUSPENDED"
    UNKNOWN = "UNKNOWN"


JOB_STATUS_TERMINAL: Final[frozenset[JobStatus]] = frozenset(
    {JobStatus.COMPLETED, JobStatus.ABORTED, JobStatus.ERROR}
)
JOB_STATUS_TERMINAL_FAILURE: Final[frozenset[JobStatus]] = frozenset({JobStatus.ABORTED, JobStatus.ERROR})
JOB_STATUS_TRANSITIONAL: Final[frozenset[JobStatus]] = frozenset({JobStatus.PENDING, JobStatus.ABORTING})
JOB_STATUS_CREATABLE: Final[frozenset[JobStatus]] = frozenset({JobStatus.PENDING, JobStatus.UNKNOWN})


class Runner(str, Enum):
    """Execution backends a job can be submitted to.

    Values are the runner identifiers written into pipeline options.
    """

    DATAFLOW = "DataflowRunner"
    DIRECT = "DirectRunner"

    @classmethod
    def runner_from_name(cls, name: str) -> "Runner":
        """Resolve a runner from its enum name or runner identifier.

        Args:
            name: `DATAFLOW`, `DataflowRunner`, `direct`, ... (case-insensitive).

        Returns:
            Runner: Matching runner.

        Raises:
            ValueError: Raised when no runner matches.
        """

        normalized_name = name.strip().lower()
        for runner in cls:
            if normalized_name in (runner.name.lower(), runner.value.lower()):
                return runner
        raise ValueError(f"unsupported runner={name}")


class FeatureSetJobDeliveryStatus(str, Enum):
    """Delivery state of one feature set spec to a running job."""

    STATUS_IN_PROGRESS = "STATUS_IN_PROGRESS"
    STATUS_DELIVERED = "STATUS_DELIVERED"


@dataclass
class FeatureSetJobStatus:
    """Per-feature-set ingestion status tracked by a job.

    Attributes:
        feature_set: Feature set extracted by the job.
        delivery_status: Whether the job acknowledged the current spec.
        version: Spec version last delivered to the job.
    """

    feature_set: FeatureSet
    delivery_status: FeatureSetJobDeliveryStatus = FeatureSetJobDeliveryStatus.STATUS_IN_PROGRESS
    version: int = 0

    def __hash__(self) -> int:
        return hash(self.feature_set.feature_set_reference())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureSetJobStatus):
            return NotImplemented
        return self.feature_set.feature_set_reference() == other.feature_set.feature_set_reference()


@dataclass(eq=False)
class Job:
    """Ingestion job binding one source to one or more stores.

    Attributes:
        id: Platform job identifier, immutable once assigned.
        runner: Backend the job executes on.
        source: Inbound event stream.
        stores: Destination stores, never empty.
        feature_set_job_statuses: Feature sets extracted by the job.
        ext_id: Backend-assigned identifier, empty before submission.
        status: Platform lifecycle state.
    """

    id: str
    runner: Runner
    source: Source
    stores: tuple[Store, ...]
    feature_set_job_statuses: set[FeatureSetJobStatus] = field(default_factory=set)
    ext_id: str = ""
    status: JobStatus = JobStatus.PENDING

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("job id must not be blank")
        if not isinstance(self.source, Source):
            raise ValueError("job requires exactly one source")
        self.stores = tuple(self.stores)
        if not self.stores:
            raise ValueError("job requires at least one store")
        if self.ext_id:
            # Jobs loaded from an existing record may already be submitted.
            return
        if self.status not in JOB_STATUS_CREATABLE:
            raise ValueError(f"job cannot be created with status={self.status.value}")

    def __setattr__(self, name: str, value: object) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("job id is immutable once assigned")
        super().__setattr__(name, value)

    def job_mark_submitted(self, ext_id: str, status: JobStatus) -> None:
        """Record the backend-assigned identifier and observed status.

        Args:
            ext_id: External job identifier returned by the runner.
            status: Translated platform status.

        Returns:
            None: Job is mutated in place.

        Raises:
            ValueError: Raised when ext_id is blank or a different id is already assigned.
        """

        normalized_ext_id = ext_id.strip()
        if not normalized_ext_id:
            raise ValueError("ext_id must not be blank")
        if self.ext_id and self.ext_id != normalized_ext_id:
            raise ValueError(f"job {self.id} already has ext_id={self.ext_id}")
        self.ext_id = normalized_ext_id
        self.status = status

    def job_feature_sets(self) -> list[FeatureSet]:
        """Return feature sets extracted by this job, ordered by reference."""

        return sorted(
            (job_status.feature_set for job_status in self.feature_set_job_statuses),
            key=lambda feature_set: feature_set.feature_set_reference(),
        )

    def job_is_running(self) -> bool:
        return self.status == JobStatus.RUNNING

    def job_is_terminal(self) -> bool:
        return self.status in JOB_STATUS_TERMINAL

    def job_clone_unsubmitted(self) -> "Job":
        """Return a copy of this job without an external identity.

        Returns:
            Job: New `PENDING` job sharing id, source, stores and feature sets.

        Raises:
            ValueError: This helper does not raise value errors for valid jobs.
        """

        return Job(
            id=self.id,
            runner=self.runner,
            source=self.source,
            stores=self.stores,
            feature_set_job_statuses=set(self.feature_set_job_statuses),
        )
