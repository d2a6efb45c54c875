"""Project-native typed exceptions for job-layer failures."""

from __future__ import annotations

from enum import Enum


class OptionsBuildError(ValueError):
    """Raised when pipeline options cannot be built for a job."""


class JobFailureReason(str, Enum):
    """Why a job manager operation failed."""

    SUBMISSION_FAILURE = "SUBMISSION_FAILURE"
    DEAD_ON_ARRIVAL = "DEAD_ON_ARRIVAL"
    ABORT_FAILURE = "ABORT_FAILURE"
    STATUS_QUERY_FAILURE = "STATUS_QUERY_FAILURE"
    INVALID_JOB_STATE = "INVALID_JOB_STATE"


class JobExecutionException(RuntimeError):
    """Raised when a job manager operation cannot hand back a healthy job.

    The underlying backend error, when there is one, is chained as
    `__cause__`.

    Attributes:
        job_id: Platform job id.
        reason: Failure category.
        ext_id: External id involved, empty when none was recorded.
        native_state: Backend state that made a fresh submission dead on arrival.
    """

    def __init__(
        self,
        message: str,
        job_id: str,
        reason: JobFailureReason,
        ext_id: str = "",
        native_state: object | None = None,
    ):
        super().__init__(message)
        self.job_id = job_id
        self.reason = reason
        self.ext_id = ext_id
        self.native_state = native_state
