"""Canonical schema-description serializer for declarative descriptors.

The canonical form is compact JSON with camelCase keys in declaration order,
enum names as strings and default-valued fields omitted, so equal descriptors
always produce byte-identical text.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .specs import FeatureSet, Source, SpecsStreamingUpdateConfig, Store

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class SpecSerializationError(ValueError):
    """Raised when a schema-description string cannot be decoded."""


def domain_spec_to_json(model: BaseModel) -> str:
    """Serialize one descriptor into its canonical schema-description string.

    Args:
        model: Source, store, feature set or streaming-update descriptor.

    Returns:
        str: Canonical JSON text.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return model.model_dump_json(by_alias=True, exclude_defaults=True)


def domain_source_from_json(payload: str) -> Source:
    """Decode a canonical source description."""

    return _domain_model_from_json(Source, payload)


def domain_store_from_json(payload: str) -> Store:
    """Decode a canonical store description."""

    return _domain_model_from_json(Store, payload)


def domain_feature_set_from_json(payload: str) -> FeatureSet:
    """Decode a canonical feature set description."""

    return _domain_model_from_json(FeatureSet, payload)


def domain_specs_streaming_update_config_from_json(payload: str) -> SpecsStreamingUpdateConfig:
    """Decode a canonical streaming-update channel description."""

    return _domain_model_from_json(SpecsStreamingUpdateConfig, payload)


def _domain_model_from_json(model_type: type[_ModelT], payload: str) -> _ModelT:
    """Validate JSON text into the requested descriptor type.

    Args:
        model_type: Target pydantic model type.
        payload: Schema-description text.

    Returns:
        _ModelT: Decoded descriptor.

    Raises:
        SpecSerializationError: Raised when the payload is not a valid description.
    """

    try:
        return model_type.model_validate_json(payload)
    except ValidationError as error:
        raise SpecSerializationError(
            f"invalid {model_type.__name__} description: {error.error_count()} validation error(s)"
        ) from error
