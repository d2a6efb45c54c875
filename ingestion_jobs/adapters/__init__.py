"""Adapter layer package for execution backend integration boundaries."""

from .dataflow_rest import DataflowRestAdapter
from .direct_runner import DirectRunnerAdapter, ProcessHandle
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
from .native_states import DataflowJobState, NativeJobState, PipelineState

__all__ = [
	"BackendAdapterError",
	"BackendAdapterPort",
	"BackendConnectionError",
	"BackendCredentialError",
	"BackendJobNotFoundError",
	"BackendRejectedError",
	"BackendResponseError",
	"BackendSubmitResult",
	"BackendTimeoutError",
	"DataflowJobState",
	"DataflowRestAdapter",
	"DirectRunnerAdapter",
	"NativeJobState",
	"PipelineState",
	"ProcessHandle",
]
