"""Typed interfaces for execution backend adapter responsibilities."""

from dataclasses import dataclass
from typing import Protocol

from ingestion_jobs.domain import ImportOptions, Runner

from .native_states import NativeJobState


@dataclass(frozen=True)
class BackendSubmitResult:
    """Result contract for backend submission.

    Attributes:
        external_job_id: Backend-assigned job identifier.
        native_state: State observed immediately after submission.
    """

    external_job_id: str
    native_state: NativeJobState


class BackendAdapterPort(Protocol):
    """Port definition for submitting and tracking jobs on one runner."""

    def adapter_runner(self) -> Runner:
        """Return the runner this adapter submits to.

        Returns:
            Runner: Runner identifier.

        Raises:
            RuntimeError: Raised when runner metadata is unavailable.
        """

    def adapter_submit(self, options: ImportOptions) -> BackendSubmitResult:
        """Submit one job built from the given options.

        Args:
            options: Fully built pipeline options.

        Returns:
            BackendSubmitResult: External job id and immediately observed state.

        Raises:
            ConnectionError: Raised when the backend cannot be reached.
            TimeoutError: Raised when the round-trip exceeds the adapter timeout.
            ValueError: Raised when the backend rejects the options or credentials.
        """

    def adapter_query_state(self, external_job_id: str) -> NativeJobState:
        """Return the current native state of a submitted job.

        Args:
            external_job_id: Backend-assigned job identifier.

        Returns:
            NativeJobState: Backend-native state.

        Raises:
            ConnectionError: Raised when the backend cannot be reached.
            LookupError: Raised when the backend does not know the job.
        """

    def adapter_cancel(self, external_job_id: str) -> None:
        """Request cancellation of a submitted job.

        Args:
            external_job_id: Backend-assigned job identifier.

        Returns:
            None: Cancellation is requested as side effect.

        Raises:
            ConnectionError: Raised when the backend cannot be reached.
            LookupError: Raised when the backend does not know the job.
        """
