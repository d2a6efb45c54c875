"""Managed streaming service adapter speaking the v1b3 jobs REST resource."""

from __future__ import annotations

import logging
from typing import Any, Callable, Final

import httpx

from ingestion_jobs.domain import ImportOptions, Runner

from .errors import (
    BackendAdapterError,
    BackendConnectionError,
    BackendCredentialError,
    BackendJobNotFoundError,
    BackendRejectedError,
    BackendResponseError,
    BackendTimeoutError,
)
from .interfaces import BackendAdapterPort, BackendSubmitResult
from .native_states import DataflowJobState, NativeJobState

logger = logging.getLogger(__name__)


class DataflowRestAdapter(BackendAdapterPort):
    """Adapter implementation for job create, get and cancel calls.

    The adapter performs exactly one HTTP round-trip per public call (two for
    in-place updates, which first resolve the running job by name) and never
    retries; retry policy belongs to the caller.
    """

    _USER_AGENT: Final[str] = "ingestion-jobs/1.0 (Python/httpx)"
    _JOB_TYPE_STREAMING: Final[str] = "JOB_TYPE_STREAMING"
    _ACTIVE_FILTER: Final[str] = "ACTIVE"

    def __init__(
        self,
        project: str,
        region: str,
        token_provider: Callable[[], str],
        base_url: str = "https://dataflow.googleapis.com",
        request_timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        """Initialize the REST adapter.

        Args:
            project: Cloud project jobs are created in.
            region: Regional endpoint location.
            token_provider: Callable returning a bearer access token.
            base_url: Service root URL.
            request_timeout_seconds: HTTP timeout per request.
            http_client: Optional preconfigured client, mainly for tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_project = project.strip()
        normalized_region = region.strip()
        normalized_base_url = base_url.strip()

        if not normalized_project:
            raise ValueError("project must not be blank")
        if not normalized_region:
            raise ValueError("region must not be blank")
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if token_provider is None:
            raise ValueError("token_provider must not be None")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._project = normalized_project
        self._region = normalized_region
        self._token_provider = token_provider
        self._client = http_client or httpx.Client(
            base_url=normalized_base_url.rstrip("/"),
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT},
        )

    def adapter_runner(self) -> Runner:
        """Return the managed streaming runner identifier."""

        return Runner.DATAFLOW

    def adapter_submit(self, options: ImportOptions) -> BackendSubmitResult:
        """Create one streaming job from pipeline options.

        Args:
            options: Fully built pipeline options.

        Returns:
            BackendSubmitResult: Created job id and its reported state.

        Raises:
            BackendConnectionError: Raised for transport failures and 5xx responses.
            BackendTimeoutError: Raised when the request times out.
            BackendCredentialError: Raised for 401/403 responses.
            BackendRejectedError: Raised for other 4xx responses.
            BackendResponseError: Raised when the response lacks a job id.
        """

        request_body: dict[str, Any] = {
            "name": options.job_name,
            "type": self._JOB_TYPE_STREAMING,
            "labels": dict(options.labels),
            "environment": {
                "tempStoragePrefix": options.temp_location,
                "zone": options.zone,
                "network": options.network,
                "subnetwork": options.subnetwork,
                "sdkPipelineOptions": {"options": options.options_to_dict()},
            },
        }
        if options.update:
            request_body["replaceJobId"] = self._adapter_find_active_job_id(job_name=options.job_name)

        response_payload = self._adapter_request("POST", self._adapter_jobs_path(), json_body=request_body)
        external_job_id = str(response_payload.get("id") or "").strip()
        if not external_job_id:
            raise BackendResponseError("job create response missing id")

        native_state = self._adapter_parse_state(response_payload.get("currentState"))
        logger.debug("created job name=%s id=%s state=%s", options.job_name, external_job_id, native_state)
        return BackendSubmitResult(external_job_id=external_job_id, native_state=native_state)

    def adapter_query_state(self, external_job_id: str) -> NativeJobState:
        """Return the current state of one job.

        Args:
            external_job_id: Backend job id.

        Returns:
            NativeJobState: Reported state, raw string when not a known value.

        Raises:
            BackendJobNotFoundError: Raised for 404 responses.
            BackendConnectionError: Raised for transport failures.
        """

        response_payload = self._adapter_request("GET", self._adapter_job_path(external_job_id))
        return self._adapter_parse_state(response_payload.get("currentState"))

    def adapter_cancel(self, external_job_id: str) -> None:
        """Request cancellation of one job.

        Args:
            external_job_id: Backend job id.

        Returns:
            None: Cancellation is requested as side effect.

        Raises:
            BackendJobNotFoundError: Raised for 404 responses.
            BackendConnectionError: Raised for transport failures.
        """

        self._adapter_request(
            "PUT",
            self._adapter_job_path(external_job_id),
            json_body={"requestedState": DataflowJobState.CANCELLED.value},
        )

    def adapter_close(self) -> None:
        """Release the underlying HTTP connection pool."""

        self._client.close()

    def _adapter_find_active_job_id(self, job_name: str) -> str:
        """Resolve the id of the active job an update replaces.

        Args:
            job_name: Display name shared by the running and replacement job.

        Returns:
            str: Id of the running job.

        Raises:
            BackendRejectedError: Raised when no active job carries the name.
        """

        response_payload = self._adapter_request(
            "GET",
            self._adapter_jobs_path(),
            query_parameters={"filter": self._ACTIVE_FILTER},
        )
        for job_payload in response_payload.get("jobs", []):
            if job_payload.get("name") == job_name and job_payload.get("id"):
                return str(job_payload["id"])
        raise BackendRejectedError(f"no active job named {job_name} to update")

    def _adapter_request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        query_parameters: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute one authenticated request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the service root.
            json_body: Optional request JSON body.
            query_parameters: Optional query string parameters.

        Returns:
            dict[str, Any]: Decoded response object, empty for empty bodies.

        Raises:
            BackendTimeoutError: Raised when the request times out.
            BackendConnectionError: Raised for transport failures and 5xx responses.
            BackendCredentialError: Raised for 401/403 responses.
            BackendJobNotFoundError: Raised for 404 responses.
            BackendRejectedError: Raised for other 4xx responses.
            BackendResponseError: Raised when the body is not a JSON object.
        """

        try:
            access_token = self._token_provider()
        except (OSError, ValueError) as error:
            raise BackendCredentialError("access token could not be obtained") from error

        try:
            response = self._client.request(
                method,
                path,
                json=json_body,
                params=query_parameters,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.TimeoutException as error:
            raise BackendTimeoutError("backend request timed out") from error
        except httpx.TransportError as error:
            raise BackendConnectionError("backend transport request failed") from error

        self._adapter_raise_for_status(response)
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as error:
            raise BackendResponseError("backend response is not valid JSON", response.status_code) from error
        if not isinstance(payload, dict):
            raise BackendResponseError("backend response is not a JSON object", response.status_code)
        return payload

    def _adapter_raise_for_status(self, response: httpx.Response) -> None:
        """Map non-success HTTP status codes onto typed adapter errors."""

        status_code = response.status_code
        if status_code < 400:
            return
        message = self._adapter_error_message(response)
        error_type: type[BackendAdapterError]
        if status_code in (401, 403):
            error_type = BackendCredentialError
        elif status_code == 404:
            error_type = BackendJobNotFoundError
        elif status_code < 500:
            error_type = BackendRejectedError
        else:
            error_type = BackendConnectionError
        raise error_type(f"backend returned HTTP {status_code}: {message}", status_code)

    def _adapter_error_message(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text.strip() or "no error detail"
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            return str(payload["error"].get("message") or "no error detail")
        return "no error detail"

    def _adapter_parse_state(self, raw_state: object) -> NativeJobState:
        """Return the known state member, or the raw value for unrecognized states."""

        if raw_state is None:
            return DataflowJobState.UNKNOWN
        state_value = str(raw_state).strip()
        try:
            return DataflowJobState(state_value)
        except ValueError:
            return state_value

    def _adapter_jobs_path(self) -> str:
        return f"/v1b3/projects/{self._project}/locations/{self._region}/jobs"

    def _adapter_job_path(self, external_job_id: str) -> str:
        normalized_job_id = external_job_id.strip()
        if not normalized_job_id:
            raise ValueError("external_job_id must not be blank")
        return f"{self._adapter_jobs_path()}/{normalized_job_id}"
