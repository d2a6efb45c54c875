"""Backend-native state to platform job status translation.

This table is the single source of truth for status semantics across all
runners. Logically equivalent native states of different backends map to the
same platform status; values missing from the table map to `UNKNOWN`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

from ingestion_jobs.adapters import DataflowJobState, NativeJobState, PipelineState
from ingestion_jobs.domain import JobStatus

_DATAFLOW_STATUS_TABLE: Final[Mapping[DataflowJobState, JobStatus]] = MappingProxyType(
    {
        DataflowJobState.UNKNOWN: JobStatus.UNKNOWN,
        DataflowJobState.STOPPED: JobStatus.SUSPENDED,
        DataflowJobState.RUNNING: JobStatus.RUNNING,
        DataflowJobState.DONE: JobStatus.COMPLETED,
        DataflowJobState.FAILED: JobStatus.ERROR,
        DataflowJobState.CANCELLED: JobStatus.ABORTED,
        DataflowJobState.UPDATED: JobStatus.ABORTED,
        DataflowJobState.DRAINING: JobStatus.ABORTING,
        DataflowJobState.DRAINED: JobStatus.ABORTED,
        DataflowJobState.PENDING: JobStatus.PENDING,
        DataflowJobState.CANCELLING: JobStatus.ABORTING,
        DataflowJobState.QUEUED: JobStatus.PENDING,
        DataflowJobState.RESOURCE_CLEANING_UP: JobStatus.ABORTING,
    }
)

_PIPELINE_STATUS_TABLE: Final[Mapping[PipelineState, JobStatus]] = MappingProxyType(
    {
        PipelineState.UNKNOWN: JobStatus.UNKNOWN,
        PipelineState.STOPPED: JobStatus.SUSPENDED,
        PipelineState.RUNNING: JobStatus.RUNNING,
        PipelineState.DONE: JobStatus.COMPLETED,
        PipelineState.FAILED: JobStatus.ERROR,
        PipelineState.CANCELLED: JobStatus.ABORTED,
        PipelineState.UPDATED: JobStatus.ABORTED,
        PipelineState.UNRECOGNIZED: JobStatus.UNKNOWN,
    }
)


def job_status_translation_table() -> Mapping[NativeJobState, JobStatus]:
    """Return the merged read-only translation table for every backend.

    Returns:
        Mapping[NativeJobState, JobStatus]: Native state to platform status.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return MappingProxyType({**_DATAFLOW_STATUS_TABLE, **_PIPELINE_STATUS_TABLE})


def job_status_translate(native_state: NativeJobState | None) -> JobStatus:
    """Translate a backend-native job state into the platform status.

    Raw string values are matched against both vocabularies by value, so a
    state reported as `"JOB_STATE_RUNNING"` or `"RUNNING"` resolves even when
    the adapter did not parse it into an enum member.

    Args:
        native_state: Backend-native state, raw string or None.

    Returns:
        JobStatus: Platform status, `UNKNOWN` for unmapped values.

    Raises:
        RuntimeError: This helper never raises for unrecognized input.
    """

    if isinstance(native_state, DataflowJobState):
        return _DATAFLOW_STATUS_TABLE.get(native_state, JobStatus.UNKNOWN)
    if isinstance(native_state, PipelineState):
        return _PIPELINE_STATUS_TABLE.get(native_state, JobStatus.UNKNOWN)
    if not isinstance(native_state, str):
        return JobStatus.UNKNOWN

    state_value = native_state.strip().upper()
    for state_type, table in ((DataflowJobState, _DATAFLOW_STATUS_TABLE), (PipelineState, _PIPELINE_STATUS_TABLE)):
        try:
            return table.get(state_type(state_value), JobStatus.UNKNOWN)
        except ValueError:
            continue
    return JobStatus.UNKNOWN
