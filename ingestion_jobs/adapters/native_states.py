"""Backend-native job state vocabularies reported by supported runners."""

from __future__ import annotations

from enum import Enum


class DataflowJobState(str, Enum):
    """Job states reported by the managed streaming service jobs resource."""

    UNKNOWN = "JOB_STATE_UNKNOWN"
    STOPPED = "JOB_STATE_STOPPED"
    RUNNING = "JOB_STATE_RUNNING"
    DONE = "JOB_STATE_DONE"
    FAILED = "JOB_STATE_FAILED"
    CANCELLED = "JOB_STATE_CANCELLED"
    UPDATED = "JOB_STATE_UPDATED"
    DRAINING = "JOB_STATE_DRAINING"
    DRAINED = "JOB_STATE_DRAINED"
    PENDING = "JOB_STATE_PENDING"
    CANCELLING = "JOB_STATE_CANCELLING"
    QUEUED = "JOB_STATE_QUEUED"
    RESOURCE_CLEANING_UP = "JOB_STATE_RESOURCE_CLEANING_UP"


class PipelineState(str, Enum):
    """Pipeline-result states reported by locally executed pipelines."""

    UNKNOWN = "UNKNOWN"
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
    DONE = "DONE"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    UPDATED = "UPDATED"
    UNRECOGNIZED = "UNRECOGNIZED"


# Raw strings carry states newer than these vocabularies.
NativeJobState = DataflowJobState | PipelineState | str
