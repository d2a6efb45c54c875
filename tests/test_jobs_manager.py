"""Regression tests for job manager submission and lifecycle transitions."""
# pylint: disable=duplicate-code

from __future__ import annotations

import pytest

from ingestion_jobs.adapters import (
    BackendAdapterPort,
    BackendConnectionError,
    BackendJobNotFoundError,
    BackendSubmitResult,
    DataflowJobState,
    NativeJobState,
)
from ingestion_jobs.domain import (
    FeatureSet,
    FeatureSetJobStatus,
    FeatureSetSpec,
    ImportOptions,
    Job,
    JobStatus,
    KafkaSourceConfig,
    RedisConfig,
    Runner,
    Source,
    SourceType,
    SpecsStreamingUpdateConfig,
    Store,
    StoreType,
    Subscription,
    domain_spec_to_json,
)
from ingestion_jobs.jobs import (
    JobExecutionException,
    JobFailureReason,
    JobManager,
    MetricsConfig,
    RunnerConfig,
)


class _BackendAdapterStub(BackendAdapterPort):
    """Backend adapter stub capturing submitted options."""

    def __init__(
        self,
        native_state: NativeJobState = DataflowJobState.RUNNING,
        external_job_ids: tuple[str, ...] = ("feast-job-0", "feast-job-1", "feast-job-2"),
        submit_error: Exception | None = None,
    ):
        """Initialize adapter stub.

        Args:
            native_state: State reported for every submission and query.
            external_job_ids: Ids handed out for consecutive submissions.
            submit_error: Optional error raised by every submission.

        Returns:
            None: Initializer does not return values.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self.native_state = native_state
        self.submitted_options: list[ImportOptions] = []
        self.cancelled_ids: list[str] = []
        self.cancel_error: Exception | None = None
        self.query_error: Exception | None = None
        self._external_job_ids = list(external_job_ids)
        self._submit_error = submit_error

    def adapter_runner(self) -> Runner:
        """Return stub runner."""

        return Runner.DATAFLOW

    def adapter_submit(self, options: ImportOptions) -> BackendSubmitResult:
        """Capture options and return the next deterministic id.

        Args:
            options: Submitted options.

        Returns:
            BackendSubmitResult: Deterministic result.

        Raises:
            Exception: Raised when the stub was configured with submit_error.
        """

        self.submitted_options.append(options)
        if self._submit_error is not None:
            raise self._submit_error
        return BackendSubmitResult(external_job_id=self._external_job_ids.pop(0), native_state=self.native_state)

    def adapter_query_state(self, external_job_id: str) -> NativeJobState:
        """Return configured state."""

        _ = external_job_id
        if self.query_error is not None:
            raise self.query_error
        return self.native_state

    def adapter_cancel(self, external_job_id: str) -> None:
        """Capture cancelled id."""

        if self.cancel_error is not None:
            raise self.cancel_error
        self.cancelled_ids.append(external_job_id)


def _build_source() -> Source:
    return Source(
        type=SourceType.KAFKA,
        kafka_source_config=KafkaSourceConfig(topic="topic", bootstrap_servers="servers:9092"),
    )


def _build_store() -> Store:
    return Store(
        name="SERVING",
        type=StoreType.REDIS,
        redis_config=RedisConfig(host="localhost", port=6379),
        subscriptions=(Subscription(project="*", name="*"),),
    )


def _build_job() -> Job:
    """Build the pending job used across scenarios.

    Returns:
        Job: Pending job with one Kafka source and one Redis store.

    Raises:
        ValueError: This helper does not raise value errors.
    """

    source = _build_source()
    feature_set = FeatureSet(spec=FeatureSetSpec(name="featureSet", source=source))
    return Job(
        id="job",
        runner=Runner.DATAFLOW,
        source=source,
        stores=(_build_store(),),
        feature_set_job_statuses={FeatureSetJobStatus(feature_set=feature_set)},
        status=JobStatus.PENDING,
    )


def _build_specs_streaming_update_config() -> SpecsStreamingUpdateConfig:
    return SpecsStreamingUpdateConfig(
        source=KafkaSourceConfig(topic="specs_topic", bootstrap_servers="servers:9092"),
    )


def _build_runner_config() -> RunnerConfig:
    return RunnerConfig(
        project="project",
        region="region",
        zone="zone",
        network="network",
        subnetwork="subnetwork",
        temp_location="tempLocation",
        labels={"orchestrator": "ingestion"},
    )


def _build_manager(adapter: _BackendAdapterStub, metrics_config: MetricsConfig | None = None) -> JobManager:
    return JobManager(
        backend_adapter=adapter,
        runner_config=_build_runner_config(),
        metrics_config=metrics_config or MetricsConfig(enabled=False),
        specs_streaming_update_config=_build_specs_streaming_update_config(),
    )


def test_jobs_manager_starts_job_with_expected_pipeline_options() -> None:
    """Start a job and submit options built from defaults, source and stores.

    Returns:
        None: Assertions validate options and the returned job.

    Raises:
        AssertionError: Raised when options or job fields are unexpected.
    """

    adapter = _BackendAdapterStub(native_state=DataflowJobState.RUNNING)
    manager = _build_manager(adapter)
    job = _build_job()

    actual = manager.job_start(job)

    assert len(adapter.submitted_options) == 1
    options = adapter.submitted_options[0]
    assert options.runner == "DataflowRunner"
    assert options.project == "project"
    assert options.region == "region"
    assert options.zone == "zone"
    assert options.network == "network"
    assert options.subnetwork == "subnetwork"
    assert options.temp_location == "tempLocation"
    assert dict(options.labels) == {"orchestrator": "ingestion"}
    assert options.update is False
    assert options.app_name == "DataflowJobManager"
    assert options.job_name == "job"
    assert options.stores_json == (domain_spec_to_json(_build_store()),)
    assert options.source_json == domain_spec_to_json(_build_source())
    assert options.specs_streaming_update_config_json == domain_spec_to_json(_build_specs_streaming_update_config())
    assert options.options_id
    assert options.dead_letter_table_spec == ""
    assert options.statsd_host == ""
    assert options.metrics_exporter_type == ""
    assert len(options.files_to_stage) > 0

    assert actual is job
    assert actual.ext_id == "feast-job-0"
    assert actual.status == JobStatus.RUNNING


def test_jobs_manager_rejects_job_terminal_at_submission() -> None:
    """Raise JobExecutionException when the backend reports FAILED immediately.

    Returns:
        None: Assertions validate dead-on-arrival handling.

    Raises:
        AssertionError: Raised when the job is returned or mutated.
    """

    adapter = _BackendAdapterStub(native_state=DataflowJobState.FAILED)
    manager = _build_manager(adapter)
    job = _build_job()

    with pytest.raises(JobExecutionException) as error_info:
        manager.job_start(job)

    assert error_info.value.reason == JobFailureReason.DEAD_ON_ARRIVAL
    assert error_info.value.native_state == DataflowJobState.FAILED
    assert error_info.value.ext_id == ""
    assert job.ext_id == ""
    assert job.status == JobStatus.PENDING


@pytest.mark.parametrize("native_state", [DataflowJobState.CANCELLED, DataflowJobState.DRAINED, "JOB_STATE_FAILED"])
def test_jobs_manager_rejects_every_terminal_failure_state(native_state: NativeJobState) -> None:
    """Treat every state translating to ERROR or ABORTED as dead on arrival."""

    manager = _build_manager(_BackendAdapterStub(native_state=native_state))

    with pytest.raises(JobExecutionException):
        manager.job_start(_build_job())


def test_jobs_manager_returns_pending_and_unknown_states() -> None:
    """Return jobs whose first observed state is pending or unrecognized.

    Returns:
        None: Assertions validate non-failure states are accepted.

    Raises:
        AssertionError: Raised when accepted states are rejected.
    """

    queued_job = _build_manager(_BackendAdapterStub(native_state=DataflowJobState.QUEUED)).job_start(_build_job())
    unknown_job = _build_manager(_BackendAdapterStub(native_state="JOB_STATE_BRAND_NEW")).job_start(_build_job())

    assert queued_job.status == JobStatus.PENDING
    assert unknown_job.status == JobStatus.UNKNOWN
    assert unknown_job.ext_id == "feast-job-0"


def test_jobs_manager_wraps_submission_failure_without_retry() -> None:
    """Surface backend errors once as JobExecutionException with cause chained.

    Returns:
        None: Assertions validate error wrapping and single submission.

    Raises:
        AssertionError: Raised when the failure is retried or swallowed.
    """

    backend_error = BackendConnectionError("backend unreachable")
    adapter = _BackendAdapterStub(submit_error=backend_error)
    manager = _build_manager(adapter)
    job = _build_job()

    with pytest.raises(JobExecutionException) as error_info:
        manager.job_start(job)

    assert error_info.value.reason == JobFailureReason.SUBMISSION_FAILURE
    assert error_info.value.__cause__ is backend_error
    assert len(adapter.submitted_options) == 1
    assert job.ext_id == ""


def test_jobs_manager_rejects_blank_external_id() -> None:
    """Never return a job without an external id."""

    manager = _build_manager(_BackendAdapterStub(external_job_ids=("  ",)))
    job = _build_job()

    with pytest.raises(JobExecutionException):
        manager.job_start(job)
    assert job.ext_id == ""


def test_jobs_manager_leaves_metrics_options_empty_when_disabled() -> None:
    """Keep collector host and exporter empty when metrics are disabled.

    Returns:
        None: Assertions validate metrics options.

    Raises:
        AssertionError: Raised when metrics options leak through.
    """

    adapter = _BackendAdapterStub()
    manager = _build_manager(
        adapter,
        metrics_config=MetricsConfig(enabled=False, host="statsd.internal", port=8125, exporter_type="statsd"),
    )

    manager.job_start(_build_job())

    options = adapter.submitted_options[0]
    assert options.statsd_host == ""
    assert options.statsd_port == 0
    assert options.metrics_exporter_type == ""
    assert options.project == "project"
    assert options.temp_location == "tempLocation"


def test_jobs_manager_populates_metrics_options_when_enabled() -> None:
    """Copy metrics configuration into options when metrics are enabled."""

    adapter = _BackendAdapterStub()
    manager = _build_manager(
        adapter,
        metrics_config=MetricsConfig(enabled=True, host="statsd.internal", port=8125, exporter_type="statsd"),
    )

    manager.job_start(_build_job())

    options = adapter.submitted_options[0]
    assert options.statsd_host == "statsd.internal"
    assert options.statsd_port == 8125
    assert options.metrics_exporter_type == "statsd"


def test_jobs_manager_uses_fresh_options_id_per_submission() -> None:
    """Produce a new options id and external id for every start call."""

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)

    first_job = manager.job_start(_build_job())
    second_job = manager.job_start(_build_job())

    assert adapter.submitted_options[0].options_id != adapter.submitted_options[1].options_id
    assert first_job.ext_id != second_job.ext_id


def test_jobs_manager_update_submits_in_place_replacement() -> None:
    """Resubmit a running job with the update flag set.

    Returns:
        None: Assertions validate update options and new identity.

    Raises:
        AssertionError: Raised when update semantics are wrong.
    """

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)
    job = manager.job_start(_build_job())

    updated_job = manager.job_update(job)

    assert adapter.submitted_options[1].update is True
    assert adapter.submitted_options[1].job_name == "job"
    assert updated_job is job
    assert updated_job.ext_id == "feast-job-1"
    assert updated_job.status == JobStatus.RUNNING


def test_jobs_manager_update_requires_submitted_job() -> None:
    """Refuse to update a job that was never submitted."""

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)

    with pytest.raises(JobExecutionException) as error_info:
        manager.job_update(_build_job())

    assert error_info.value.reason == JobFailureReason.INVALID_JOB_STATE
    assert adapter.submitted_options == []


def test_jobs_manager_abort_marks_job_aborting() -> None:
    """Cancel the external job and mark the record ABORTING."""

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)
    job = manager.job_start(_build_job())

    aborted_job = manager.job_abort(job)

    assert adapter.cancelled_ids == ["feast-job-0"]
    assert aborted_job.status == JobStatus.ABORTING


def test_jobs_manager_abort_wraps_missing_backend_job() -> None:
    """Surface unknown external ids as abort failures and keep status unchanged."""

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)
    job = manager.job_start(_build_job())
    adapter.cancel_error = BackendJobNotFoundError("no such job", 404)

    with pytest.raises(JobExecutionException) as error_info:
        manager.job_abort(job)

    assert error_info.value.reason == JobFailureReason.ABORT_FAILURE
    assert error_info.value.ext_id == "feast-job-0"
    assert job.status == JobStatus.RUNNING


def test_jobs_manager_restart_aborts_then_starts_fresh_submission() -> None:
    """Abort a running job and return a new record with a new external id.

    Returns:
        None: Assertions validate restart sequencing.

    Raises:
        AssertionError: Raised when restart does not abort or resubmit.
    """

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)
    job = manager.job_start(_build_job())

    restarted_job = manager.job_restart(job)

    assert adapter.cancelled_ids == ["feast-job-0"]
    assert job.status == JobStatus.ABORTING
    assert restarted_job is not job
    assert restarted_job.id == "job"
    assert restarted_job.ext_id == "feast-job-1"
    assert restarted_job.status == JobStatus.RUNNING
    assert adapter.submitted_options[1].update is False


def test_jobs_manager_get_status_translates_backend_state() -> None:
    """Query and translate the backend state of a submitted job."""

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)
    job = manager.job_start(_build_job())
    adapter.native_state = DataflowJobState.DRAINING

    assert manager.job_get_status(job) == JobStatus.ABORTING
    assert manager.job_get_status(_build_job()) == JobStatus.PENDING


def test_jobs_manager_get_status_wraps_query_failure() -> None:
    """Surface backend query errors as JobExecutionException."""

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)
    job = manager.job_start(_build_job())
    adapter.query_error = BackendConnectionError("backend unreachable")

    with pytest.raises(JobExecutionException) as error_info:
        manager.job_get_status(job)

    assert error_info.value.reason == JobFailureReason.STATUS_QUERY_FAILURE


def test_jobs_manager_wraps_staging_resolution_failure() -> None:
    """Surface I/O errors from staging resolution as submission failures.

    Returns:
        None: Assertions validate error wrapping before any submission.

    Raises:
        AssertionError: Raised when the raw error escapes or a job is submitted.
    """

    staging_error = OSError("cannot list staging dir")

    def failing_resolver(runner_config: RunnerConfig) -> tuple[str, ...]:
        _ = runner_config
        raise staging_error

    adapter = _BackendAdapterStub()
    manager = JobManager(
        backend_adapter=adapter,
        runner_config=_build_runner_config(),
        metrics_config=MetricsConfig(enabled=False),
        specs_streaming_update_config=_build_specs_streaming_update_config(),
        files_to_stage_resolver=failing_resolver,
    )
    job = _build_job()

    with pytest.raises(JobExecutionException) as error_info:
        manager.job_start(job)

    assert error_info.value.reason == JobFailureReason.SUBMISSION_FAILURE
    assert error_info.value.__cause__ is staging_error
    assert adapter.submitted_options == []
    assert job.ext_id == ""


def test_jobs_manager_start_rejects_already_submitted_job() -> None:
    """Refuse a second start of the same job without contacting the backend.

    Returns:
        None: Assertions validate the job keeps its first submission.

    Raises:
        AssertionError: Raised when a second backend job is created.
    """

    adapter = _BackendAdapterStub()
    manager = _build_manager(adapter)
    job = manager.job_start(_build_job())

    with pytest.raises(JobExecutionException) as error_info:
        manager.job_start(job)

    assert error_info.value.reason == JobFailureReason.INVALID_JOB_STATE
    assert error_info.value.ext_id == "feast-job-0"
    assert len(adapter.submitted_options) == 1
    assert job.ext_id == "feast-job-0"
    assert job.status == JobStatus.RUNNING
