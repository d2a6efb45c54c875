"""Job layer package for ingestion job lifecycle orchestration."""

from .errors import JobExecutionException, JobFailureReason, OptionsBuildError
from .interfaces import JobManagerPort
from .manager import JobManager
from .registry import InMemoryJobRegistry, JobRegistryPort
from .options import (
	FilesToStageResolver,
	MetricsConfig,
	RunnerConfig,
	job_options_build,
	job_options_resolve_files_to_stage,
)
from .status_translation import job_status_translate, job_status_translation_table

__all__ = [
	"FilesToStageResolver",
	"JobExecutionException",
	"JobFailureReason",
	"JobManager",
	"InMemoryJobRegistry",
	"JobManagerPort",
	"JobRegistryPort",
	"MetricsConfig",
	"OptionsBuildError",
	"RunnerConfig",
	"job_options_build",
	"job_options_resolve_files_to_stage",
	"job_status_translate",
	"job_status_translation_table",
]
