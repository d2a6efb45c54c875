"""Local direct-execution adapter running the ingestion pipeline as a process."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import subprocess
import threading
from typing import Callable, Final, Protocol, Sequence

from ingestion_jobs.domain import ImportOptions, Runner

from .errors import BackendConnectionError, BackendJobNotFoundError
from .interfaces import BackendAdapterPort, BackendSubmitResult
from .native_states import NativeJobState, PipelineState

logger = logging.getLogger(__name__)

_TERMINAL_PIPELINE_STATES: Final[frozenset[PipelineState]] = frozenset(
    {PipelineState.DONE, PipelineState.FAILED, PipelineState.CANCELLED}
)


class ProcessHandle(Protocol):
    """Subset of `subprocess.Popen` used to track local pipelines."""

    returncode: int | None

    def poll(self) -> int | None:
        """Return the exit code, or None while the process runs."""

    def terminate(self) -> None:
        """Ask the process to stop."""


@dataclass
class _DirectJobHandle:
    """Registry entry for one locally launched pipeline.

    Attributes:
        job_name: Platform job id the pipeline was launched for.
        process: Process running the pipeline.
        cancelled: Whether cancellation was requested through this adapter.
        terminal_reported: Whether a final state was already returned to a caller.
    """

    job_name: str
    process: ProcessHandle
    cancelled: bool = False
    terminal_reported: bool = False


def _adapter_default_process_factory(arguments: Sequence[str]) -> ProcessHandle:
    return subprocess.Popen(list(arguments), stdin=subprocess.DEVNULL)


class DirectRunnerAdapter(BackendAdapterPort):
    """Adapter launching pipelines on the local machine.

    Launched processes are tracked in an in-memory registry guarded by a lock,
    so one adapter instance may serve concurrent job managers.

    Handles whose final state was already reported are evicted on the next
    submission; later lookups of their ids raise `BackendJobNotFoundError`.
    """

    def __init__(
        self,
        pipeline_command: Sequence[str],
        process_factory: Callable[[Sequence[str]], ProcessHandle] | None = None,
    ):
        """Initialize the direct runner adapter.

        Args:
            pipeline_command: Command prefix starting the ingestion pipeline.
            process_factory: Optional process launcher, `subprocess.Popen` by default.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the pipeline command is empty.
        """

        normalized_command = [str(part) for part in pipeline_command if str(part).strip()]
        if not normalized_command:
            raise ValueError("pipeline_command must not be empty")

        self._pipeline_command = tuple(normalized_command)
        self._process_factory = process_factory or _adapter_default_process_factory
        self._jobs: dict[str, _DirectJobHandle] = {}
        self._lock = threading.Lock()

    def adapter_runner(self) -> Runner:
        """Return the local direct runner identifier."""

        return Runner.DIRECT

    def adapter_submit(self, options: ImportOptions) -> BackendSubmitResult:
        """Launch one local pipeline process.

        In-place updates stop every pipeline previously launched for the same
        job name before the replacement starts.

        Args:
            options: Fully built pipeline options.

        Returns:
            BackendSubmitResult: Local job id and the state observed after launch.

        Raises:
            BackendConnectionError: Raised when the process cannot be started.
        """

        if options.update:
            self._adapter_stop_jobs_named(options.job_name)

        arguments = [*self._pipeline_command, *options.options_to_args()]
        try:
            process = self._process_factory(arguments)
        except OSError as error:
            raise BackendConnectionError(f"pipeline process could not be started: {error}") from error

        external_job_id = f"{options.job_name}-{options.options_id[:8]}"
        handle = _DirectJobHandle(job_name=options.job_name, process=process)
        with self._lock:
            self._adapter_evict_reported_jobs()
            self._jobs[external_job_id] = handle
        logger.debug("launched local pipeline id=%s", external_job_id)
        return BackendSubmitResult(external_job_id=external_job_id, native_state=self._adapter_handle_state(handle))

    def adapter_query_state(self, external_job_id: str) -> NativeJobState:
        """Return the state of one local pipeline.

        Args:
            external_job_id: Local job id.

        Returns:
            NativeJobState: RUNNING, DONE, FAILED or CANCELLED.

        Raises:
            BackendJobNotFoundError: Raised when no pipeline has the id.
        """

        handle = self._adapter_get_handle(external_job_id)
        native_state = self._adapter_handle_state(handle)
        if native_state in _TERMINAL_PIPELINE_STATES:
            handle.terminal_reported = True
        return native_state

    def adapter_cancel(self, external_job_id: str) -> None:
        """Terminate one local pipeline.

        Args:
            external_job_id: Local job id.

        Returns:
            None: Process is terminated as side effect.

        Raises:
            BackendJobNotFoundError: Raised when no pipeline has the id.
        """

        handle = self._adapter_get_handle(external_job_id)
        self._adapter_terminate(handle)

    def _adapter_get_handle(self, external_job_id: str) -> _DirectJobHandle:
        with self._lock:
            handle = self._jobs.get(external_job_id.strip())
        if handle is None:
            raise BackendJobNotFoundError(f"no local pipeline with id={external_job_id}")
        return handle

    def _adapter_evict_reported_jobs(self) -> None:
        """Drop handles whose final state was reported; caller holds the lock."""

        for external_job_id in [key for key, handle in self._jobs.items() if handle.terminal_reported]:
            del self._jobs[external_job_id]

    def _adapter_stop_jobs_named(self, job_name: str) -> None:
        with self._lock:
            handles = [handle for handle in self._jobs.values() if handle.job_name == job_name]
        for handle in handles:
            self._adapter_terminate(handle)

    def _adapter_terminate(self, handle: _DirectJobHandle) -> None:
        if handle.process.poll() is None:
            handle.process.terminate()
        handle.cancelled = True

    def _adapter_handle_state(self, handle: _DirectJobHandle) -> PipelineState:
        """Derive pipeline state from process exit status.

        Args:
            handle: Registry entry.

        Returns:
            PipelineState: Current state.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if handle.cancelled:
            return PipelineState.CANCELLED
        return_code = handle.process.poll()
        if return_code is None:
            return PipelineState.RUNNING
        if return_code == 0:
            return PipelineState.DONE
        return PipelineState.FAILED
