"""Tests for jobs API start, inspect, abort and restart endpoints."""
# pylint: disable=duplicate-code

from __future__ import annotations

import threading
import time

from fastapi.testclient import TestClient

from ingestion_jobs.adapters import (
    BackendAdapterPort,
    BackendConnectionError,
    BackendSubmitResult,
    NativeJobState,
    PipelineState,
)
from ingestion_jobs.api.application import create_api_application
from ingestion_jobs.config import AppSettings
from ingestion_jobs.domain import ImportOptions, KafkaSourceConfig, Runner, SpecsStreamingUpdateConfig
from ingestion_jobs.jobs import InMemoryJobRegistry, JobManager, MetricsConfig, RunnerConfig


class _BackendAdapterStub(BackendAdapterPort):
    """Direct-runner adapter stub with controllable state."""

    def __init__(self, native_state: NativeJobState = PipelineState.RUNNING):
        """Initialize adapter stub.

        Args:
            native_state: State reported for submissions and queries.

        Returns:
            None: Initializer does not return values.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self.native_state = native_state
        self.submit_error: Exception | None = None
        self.submitted_options: list[ImportOptions] = []
        self.cancelled_ids: list[str] = []

    def adapter_runner(self) -> Runner:
        """Return stub runner."""

        return Runner.DIRECT

    def adapter_submit(self, options: ImportOptions) -> BackendSubmitResult:
        """Capture options and return a sequential id.

        Args:
            options: Submitted options.

        Returns:
            BackendSubmitResult: Deterministic result.

        Raises:
            Exception: Raised when submit_error is configured.
        """

        if self.submit_error is not None:
            raise self.submit_error
        self.submitted_options.append(options)
        return BackendSubmitResult(
            external_job_id=f"local-{len(self.submitted_options)}",
            native_state=self.native_state,
        )

    def adapter_query_state(self, external_job_id: str) -> NativeJobState:
        """Return configured state."""

        _ = external_job_id
        return self.native_state

    def adapter_cancel(self, external_job_id: str) -> None:
        """Capture cancelled id."""

        self.cancelled_ids.append(external_job_id)


class _SlowBackendAdapterStub(_BackendAdapterStub):
    """Adapter stub whose submissions take long enough for requests to overlap."""

    def adapter_submit(self, options: ImportOptions) -> BackendSubmitResult:
        """Delay, then submit like the base stub."""

        time.sleep(0.2)
        return super().adapter_submit(options)


def _build_client(adapter: _BackendAdapterStub) -> TestClient:
    """Create a test client over a real job manager and in-memory registry.

    Args:
        adapter: Backend adapter stub.

    Returns:
        TestClient: Client for the assembled application.

    Raises:
        ValueError: Raised by AppSettings when values are invalid.
    """

    job_manager = JobManager(
        backend_adapter=adapter,
        runner_config=RunnerConfig(temp_location="/tmp/ingestion", files_to_stage=("/opt/pipeline",)),
        metrics_config=MetricsConfig(),
        specs_streaming_update_config=SpecsStreamingUpdateConfig(
            source=KafkaSourceConfig(topic="specs_topic", bootstrap_servers="servers:9092"),
        ),
    )
    application = create_api_application(
        AppSettings(environment_name="test", runner="DirectRunner"),
        job_manager,
        InMemoryJobRegistry(),
    )
    return TestClient(application)


def _build_job_payload(job_id: str = "job", runner: str | None = None) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": job_id,
        "source": {
            "type": "KAFKA",
            "kafkaSourceConfig": {"bootstrapServers": "servers:9092", "topic": "topic"},
        },
        "stores": [
            {
                "name": "SERVING",
                "type": "REDIS",
                "subscriptions": [{"project": "*", "name": "*"}],
                "redisConfig": {"host": "localhost", "port": 6379},
            }
        ],
        "feature_sets": [{"spec": {"project": "rides", "name": "driver"}}],
    }
    if runner is not None:
        payload["runner"] = runner
    return payload


def test_api_jobs_start_returns_created_job() -> None:
    """Start a job and return its external id and translated status.

    Returns:
        None: Assertions validate response payload.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    adapter = _BackendAdapterStub()
    client = _build_client(adapter)

    response = client.post("/jobs", json=_build_job_payload())

    assert response.status_code == 201
    assert response.json() == {
        "id": "job",
        "ext_id": "local-1",
        "runner": "DirectRunner",
        "status": "RUNNING",
        "source": "KAFKA/servers:9092/topic",
        "stores": ["SERVING"],
        "feature_sets": ["rides/driver"],
    }
    assert adapter.submitted_options[0].app_name == "DirectJobManager"


def test_api_jobs_start_rejects_runner_mismatch() -> None:
    """Return HTTP 400 when the request targets a different runner."""

    client = _build_client(_BackendAdapterStub())

    response = client.post("/jobs", json=_build_job_payload(runner="DataflowRunner"))

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_JOB"


def test_api_jobs_start_rejects_request_without_stores() -> None:
    """Return HTTP 422 when the request has no stores."""

    payload = _build_job_payload()
    payload["stores"] = []

    response = _build_client(_BackendAdapterStub()).post("/jobs", json=payload)

    assert response.status_code == 422


def test_api_jobs_start_returns_bad_gateway_for_dead_on_arrival_job() -> None:
    """Return HTTP 502 with the failure reason when the job fails at submission.

    Returns:
        None: Assertions validate error payload.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = _build_client(_BackendAdapterStub(native_state=PipelineState.FAILED))

    response = client.post("/jobs", json=_build_job_payload())

    assert response.status_code == 502
    assert response.json()["code"] == "DEAD_ON_ARRIVAL"
    assert response.json()["job_id"] == "job"
    assert client.get("/jobs").json()["returned"] == 0


def test_api_jobs_start_returns_bad_gateway_for_submission_failure() -> None:
    """Return HTTP 502 when the backend cannot be reached."""

    adapter = _BackendAdapterStub()
    adapter.submit_error = BackendConnectionError("backend unreachable")

    response = _build_client(adapter).post("/jobs", json=_build_job_payload())

    assert response.status_code == 502
    assert response.json()["code"] == "SUBMISSION_FAILURE"


def test_api_jobs_start_rejects_duplicate_active_job() -> None:
    """Return HTTP 409 when a job with the same id is still active."""

    client = _build_client(_BackendAdapterStub())
    client.post("/jobs", json=_build_job_payload())

    response = client.post("/jobs", json=_build_job_payload())

    assert response.status_code == 409
    assert response.json()["code"] == "JOB_ALREADY_ACTIVE"


def test_api_jobs_list_and_detail_refresh_status() -> None:
    """List registered jobs and refresh status from the backend on detail reads.

    Returns:
        None: Assertions validate list and detail payloads.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    adapter = _BackendAdapterStub()
    client = _build_client(adapter)
    client.post("/jobs", json=_build_job_payload(job_id="b-job"))
    client.post("/jobs", json=_build_job_payload(job_id="a-job"))
    adapter.native_state = PipelineState.DONE

    list_response = client.get("/jobs")
    detail_response = client.get("/jobs/a-job")

    assert list_response.status_code == 200
    assert [item["id"] for item in list_response.json()["items"]] == ["a-job", "b-job"]
    assert detail_response.status_code == 200
    assert detail_response.json()["status"] == "COMPLETED"


def test_api_jobs_detail_returns_not_found_for_unknown_job() -> None:
    """Return HTTP 404 for ids never submitted through this process."""

    response = _build_client(_BackendAdapterStub()).get("/jobs/missing")

    assert response.status_code == 404
    assert response.json()["code"] == "JOB_NOT_FOUND"


def test_api_jobs_abort_marks_job_aborting() -> None:
    """Return HTTP 202 on first abort and HTTP 200 when already aborting."""

    adapter = _BackendAdapterStub()
    client = _build_client(adapter)
    client.post("/jobs", json=_build_job_payload())

    first_response = client.post("/jobs/job/abort")
    second_response = client.post("/jobs/job/abort")

    assert first_response.status_code == 202
    assert first_response.json()["status"] == "ABORTING"
    assert second_response.status_code == 200
    assert adapter.cancelled_ids == ["local-1"]


def test_api_jobs_restart_replaces_registered_job() -> None:
    """Abort and resubmit a job, storing the new external id."""

    adapter = _BackendAdapterStub()
    client = _build_client(adapter)
    client.post("/jobs", json=_build_job_payload())

    response = client.post("/jobs/job/restart")

    assert response.status_code == 201
    assert response.json()["ext_id"] == "local-2"
    assert response.json()["status"] == "RUNNING"
    assert adapter.cancelled_ids == ["local-1"]
    assert client.get("/jobs").json()["items"][0]["ext_id"] == "local-2"


def test_api_jobs_start_serializes_concurrent_requests_for_same_id() -> None:
    """Submit once when several requests start the same job id concurrently.

    Returns:
        None: Assertions validate one creation and conflicts for the rest.

    Raises:
        AssertionError: Raised when more than one backend job is created.
    """

    adapter = _SlowBackendAdapterStub()
    client = _build_client(adapter)
    status_codes: list[int] = []
    status_codes_lock = threading.Lock()

    def start_job() -> None:
        response = client.post("/jobs", json=_build_job_payload(job_id="dup"))
        with status_codes_lock:
            status_codes.append(response.status_code)

    threads = [threading.Thread(target=start_job) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(status_codes) == [201, 409, 409]
    assert len(adapter.submitted_options) == 1
