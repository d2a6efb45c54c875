"""Request and response contracts for the jobs API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ingestion_jobs.domain import FeatureSet, FeatureSetJobStatus, Job, Runner, Source, Store


class JobStartRequest(BaseModel):
    """Declarative job description accepted by `POST /jobs`.

    Attributes:
        id: Platform job id.
        runner: Optional runner; must match the serving job manager when set.
        source: Inbound event stream.
        stores: Destination stores, at least one.
        feature_sets: Feature sets extracted by the job.
    """

    id: str = Field(min_length=1)
    runner: Runner | None = None
    source: Source
    stores: list[Store] = Field(min_length=1)
    feature_sets: list[FeatureSet] = Field(default_factory=list)

    def request_to_job(self, runner: Runner) -> Job:
        """Build a pending job record for the given runner.

        Args:
            runner: Runner of the serving job manager.

        Returns:
            Job: Pending job.

        Raises:
            ValueError: Raised when the requested runner differs or the job is invalid.
        """

        if self.runner is not None and self.runner != runner:
            raise ValueError(f"job requests runner={self.runner.value} but this service runs {runner.value}")
        return Job(
            id=self.id.strip(),
            runner=runner,
            source=self.source,
            stores=tuple(self.stores),
            feature_set_job_statuses={FeatureSetJobStatus(feature_set=feature_set) for feature_set in self.feature_sets},
        )


def api_serialize_job(job: Job) -> dict[str, object]:
    """Serialize a job record to JSON response payload.

    Args:
        job: Job record.

    Returns:
        dict[str, object]: JSON-compatible payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "id": job.id,
        "ext_id": job.ext_id,
        "runner": job.runner.value,
        "status": job.status.value,
        "source": job.source.source_identifier(),
        "stores": [store.name for store in job.stores],
        "feature_sets": [feature_set.feature_set_reference() for feature_set in job.job_feature_sets()],
    }
