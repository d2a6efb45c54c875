"""Domain models used across application layer boundaries."""

from .models import (
	JOB_STATUS_CREATABLE,
	JOB_STATUS_TERMINAL,
	JOB_STATUS_TERMINAL_FAILURE,
	JOB_STATUS_TRANSITIONAL,
	FeatureSetJobDeliveryStatus,
	FeatureSetJobStatus,
	Job,
	JobStatus,
	Runner,
)
from .pipeline_options import ImportOptions
from .serialization import (
	SpecSerializationError,
	domain_feature_set_from_json,
	domain_source_from_json,
	domain_spec_to_json,
	domain_specs_streaming_update_config_from_json,
	domain_store_from_json,
)
from .specs import (
	BigQueryConfig,
	EntitySpec,
	FeatureSet,
	FeatureSetMeta,
	FeatureSetSpec,
	FeatureSetState,
	FeatureSpec,
	KafkaSourceConfig,
	RedisClusterConfig,
	RedisConfig,
	Source,
	SourceType,
	SpecsStreamingUpdateConfig,
	Store,
	StoreType,
	Subscription,
	ValueType,
)

__all__ = [
	"JOB_STATUS_CREATABLE",
	"JOB_STATUS_TERMINAL",
	"JOB_STATUS_TERMINAL_FAILURE",
	"JOB_STATUS_TRANSITIONAL",
	"BigQueryConfig",
	"EntitySpec",
	"FeatureSet",
	"FeatureSetJobDeliveryStatus",
	"FeatureSetJobStatus",
	"FeatureSetMeta",
	"FeatureSetSpec",
	"FeatureSetState",
	"FeatureSpec",
	"ImportOptions",
	"Job",
	"JobStatus",
	"KafkaSourceConfig",
	"RedisClusterConfig",
	"RedisConfig",
	"Runner",
	"Source",
	"SourceType",
	"SpecSerializationError",
	"SpecsStreamingUpdateConfig",
	"Store",
	"StoreType",
	"Subscription",
	"ValueType",
	"domain_feature_set_from_json",
	"domain_source_from_json",
	"domain_spec_to_json",
	"domain_specs_streaming_update_config_from_json",
	"domain_store_from_json",
]
