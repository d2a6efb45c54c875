"""Declarative source, store and feature-set descriptors.

Descriptors are immutable pydantic models. Their canonical schema-description
form (see `ingestion_jobs.domain.serialization`) uses camelCase keys, so every
model shares one alias configuration.
"""

from __future__ import annotations

from enum import Enum
from fnmatch import fnmatchcase

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _SpecModel(BaseModel):
    """Base model for frozen camelCase-aliased descriptors."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class SourceType(str, Enum):
    """Supported inbound event-stream kinds."""

    INVALID = "INVALID"
    KAFKA = "KAFKA"


class StoreType(str, Enum):
    """Supported destination store kinds."""

    INVALID = "INVALID"
    REDIS = "REDIS"
    BIGQUERY = "BIGQUERY"
    REDIS_CLUSTER = "REDIS_CLUSTER"


class ValueType(str, Enum):
    """Field value types a feature set may declare."""

    INVALID = "INVALID"
    BYTES = "BYTES"
    STRING = "STRING"
    INT32 = "INT32"
    INT64 = "INT64"
    DOUBLE = "DOUBLE"
    FLOAT = "FLOAT"
    BOOL = "BOOL"


class FeatureSetState(str, Enum):
    """Platform-managed feature set lifecycle marker."""

    STATUS_INVALID = "STATUS_INVALID"
    STATUS_PENDING = "STATUS_PENDING"
    STATUS_READY = "STATUS_READY"


class KafkaSourceConfig(_SpecModel):
    """Message-queue topic connection descriptor.

    Attributes:
        bootstrap_servers: Comma-separated broker endpoints.
        topic: Topic the job consumes from.
        partitions: Optional partition count hint, zero when unknown.
    """

    bootstrap_servers: str = Field(min_length=1)
    topic: str = Field(min_length=1)
    partitions: int = Field(default=0, ge=0)


class Source(_SpecModel):
    """Tagged union over inbound event-stream kinds.

    Attributes:
        type: Source kind tag.
        kafka_source_config: Connection config, required when `type` is KAFKA.
    """

    type: SourceType = SourceType.INVALID
    kafka_source_config: KafkaSourceConfig | None = None

    @model_validator(mode="after")
    def _validate_config_matches_type(self) -> "Source":
        if self.type == SourceType.KAFKA and self.kafka_source_config is None:
            raise ValueError("KAFKA source requires kafka_source_config")
        if self.type != SourceType.KAFKA and self.kafka_source_config is not None:
            raise ValueError(f"kafka_source_config is not valid for source type {self.type.value}")
        return self

    def source_identifier(self) -> str:
        """Return a stable `type/servers/topic` identifier for grouping jobs.

        Returns:
            str: Identifier of the inbound stream.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if self.kafka_source_config is None:
            return self.type.value
        return f"{self.type.value}/{self.kafka_source_config.bootstrap_servers}/{self.kafka_source_config.topic}"


class Subscription(_SpecModel):
    """Project/name glob pair selecting feature sets for a store.

    Attributes:
        project: Project glob, `*` matches every project.
        name: Feature set name glob.
        exclude: When true a match removes the feature set instead of adding it.
    """

    project: str = Field(min_length=1)
    name: str = Field(min_length=1)
    exclude: bool = False

    def subscription_matches(self, project: str, name: str) -> bool:
        """Return whether this subscription's globs match a feature set.

        Args:
            project: Feature set project.
            name: Feature set name.

        Returns:
            bool: True when both globs match.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return fnmatchcase(project, self.project) and fnmatchcase(name, self.name)


class RedisConfig(_SpecModel):
    """Single-node key-value store endpoint."""

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)


class RedisClusterConfig(_SpecModel):
    """Clustered key-value store endpoint list."""

    connection_string: str = Field(min_length=1)


class BigQueryConfig(_SpecModel):
    """Warehouse table destination."""

    project_id: str = Field(min_length=1)
    dataset_id: str = Field(min_length=1)
    staging_location: str = ""


class Store(_SpecModel):
    """Tagged union over destination kinds plus its subscriptions.

    A store with no subscriptions is legal; it receives nothing until one is
    added. The catch-all pair (`*`, `*`) subscribes to every feature set.

    Attributes:
        name: Store name, unique within the platform.
        type: Destination kind tag.
        subscriptions: Feature-set filters for this store.
        redis_config: Endpoint when `type` is REDIS.
        bigquery_config: Destination when `type` is BIGQUERY.
        redis_cluster_config: Endpoints when `type` is REDIS_CLUSTER.
    """

    name: str = Field(min_length=1)
    type: StoreType = StoreType.INVALID
    subscriptions: tuple[Subscription, ...] = ()
    redis_config: RedisConfig | None = None
    bigquery_config: BigQueryConfig | None = None
    redis_cluster_config: RedisClusterConfig | None = None

    @model_validator(mode="after")
    def _validate_config_matches_type(self) -> "Store":
        configured = {
            StoreType.REDIS: self.redis_config,
            StoreType.BIGQUERY: self.bigquery_config,
            StoreType.REDIS_CLUSTER: self.redis_cluster_config,
        }
        for store_type, config in configured.items():
            if store_type == self.type and config is None:
                raise ValueError(f"{store_type.value} store requires its config block")
            if store_type != self.type and config is not None:
                raise ValueError(f"config block for {store_type.value} is not valid for store type {self.type.value}")
        return self

    def store_is_subscribed(self, project: str, name: str) -> bool:
        """Return whether a feature set is delivered to this store.

        Args:
            project: Feature set project.
            name: Feature set name.

        Returns:
            bool: True when an inclusive subscription matches and no exclusion does.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        included = False
        for subscription in self.subscriptions:
            if not subscription.subscription_matches(project, name):
                continue
            if subscription.exclude:
                return False
            included = True
        return included


class EntitySpec(_SpecModel):
    """Entity key column of a feature set."""

    name: str = Field(min_length=1)
    value_type: ValueType = ValueType.INVALID


class FeatureSpec(_SpecModel):
    """Typed feature column of a feature set."""

    name: str = Field(min_length=1)
    value_type: ValueType = ValueType.INVALID


class FeatureSetSpec(_SpecModel):
    """Schema of one feature set.

    Attributes:
        project: Owning project, `default` when empty.
        name: Feature set name.
        entities: Entity key columns.
        features: Feature columns.
        max_age_seconds: Max staleness; zero means unbounded.
        source: Inbound stream the feature set is read from.
    """

    project: str = ""
    name: str = Field(min_length=1)
    entities: tuple[EntitySpec, ...] = ()
    features: tuple[FeatureSpec, ...] = ()
    max_age_seconds: int = Field(default=0, ge=0)
    source: Source | None = None


class FeatureSetMeta(_SpecModel):
    """Platform-managed feature set metadata."""

    status: FeatureSetState = FeatureSetState.STATUS_INVALID
    version: int = Field(default=0, ge=0)


class FeatureSet(_SpecModel):
    """Feature set spec together with its platform metadata."""

    spec: FeatureSetSpec
    meta: FeatureSetMeta = FeatureSetMeta()

    def feature_set_reference(self) -> str:
        """Return the `project/name` reference of this feature set.

        Returns:
            str: Reference string.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        project = self.spec.project or "default"
        return f"{project}/{self.spec.name}"


class SpecsStreamingUpdateConfig(_SpecModel):
    """Channel a running job listens on for feature-set spec changes.

    Attributes:
        source: Topic the job reads spec updates from.
        ack_topic: Topic the job acknowledges applied specs on.
    """

    source: KafkaSourceConfig
    ack_topic: str = ""
