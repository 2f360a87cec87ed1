"""Per-model-type version configuration.

WHY: Each versioned model type carries static metadata: its current
version, which version to emit by default, the name of the tag field,
whether to always run converters, and the two converters. This metadata
must be validated once, when the model is registered, and never change
afterwards so it can be read from any thread without locking.

HOW: VersionedModelConfig is a frozen pydantic model. Validators
canonicalize the version fields through parse_version(), fill
default_serialize_to_version from current_version, and check that the
converter references are callable.

RULES:
- Instances are immutable (frozen); equality compares every field, with
  converters compared by identity
- current_version is required and canonicalized ("03" -> "3")
- default_serialize_to_version defaults to current_version
- property_name defaults to config.DEFAULT_PROPERTY_NAME
- Converters may be functions, VersionedModelConverter instances, or
  VersionedModelConverter subclasses
- serialize_to_version_attribute names an instance attribute holding an
  optional per-instance serialize-to version (explicit registration of the
  override accessor)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from model_versioning import config
from model_versioning.core.converter import converter_name, is_converter_ref
from model_versioning.core.version import VersionId, parse_version, versions_equal

logger = logging.getLogger(__name__)


class VersionedModelConfig(BaseModel):
    """Immutable version metadata for one model type.

    WHY: Registration is the only time this data is written. Freezing it
    lets the registry hand the same object to concurrent readers.

    HOW: Built directly or through the versioned_model() decorator, then
    stored in a ModelRegistry keyed by the model type.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    current_version: str = Field(
        description="Version the in-memory model is shaped as.",
    )
    default_serialize_to_version: Optional[str] = Field(
        default=None,
        description="Version emitted when no per-instance override is set. "
        "Defaults to current_version.",
    )
    property_name: str = Field(
        default_factory=lambda: config.DEFAULT_PROPERTY_NAME,
        description="Name of the document field carrying the version tag.",
    )
    always_convert: bool = Field(
        default=False,
        description="Run converters even when source and target versions match.",
    )
    to_current_converter: Optional[Any] = Field(
        default=None,
        description="Converter upgrading documents to current_version.",
    )
    to_past_converter: Optional[Any] = Field(
        default=None,
        description="Converter down-converting documents from current_version.",
    )
    serialize_to_version_attribute: Optional[str] = Field(
        default=None,
        description="Instance attribute holding an optional serialize-to version.",
    )

    @field_validator("current_version", "default_serialize_to_version", mode="before")
    @classmethod
    def _canonical_version(cls, value: Any) -> Optional[VersionId]:
        if value is None:
            return None
        return parse_version(value)

    @field_validator("property_name")
    @classmethod
    def _non_empty_property_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("property_name must not be empty")
        return value

    @field_validator("to_current_converter", "to_past_converter")
    @classmethod
    def _callable_converter(cls, value: Any) -> Any:
        if value is not None and not is_converter_ref(value):
            raise ValueError(
                "converter must be callable or a VersionedModelConverter subclass, "
                "got {!r}".format(value)
            )
        return value

    @model_validator(mode="after")
    def _fill_defaults(self) -> VersionedModelConfig:
        if self.default_serialize_to_version is None:
            # Frozen model: bypass __setattr__ during validation only.
            object.__setattr__(self, "default_serialize_to_version", self.current_version)
        elif (
            not versions_equal(self.default_serialize_to_version, self.current_version)
            and self.to_past_converter is None
        ):
            logger.warning(
                "default_serialize_to_version %s differs from current_version %s "
                "but no to_past_converter is configured; serialization will fail",
                self.default_serialize_to_version,
                self.current_version,
            )
        return self

    @property
    def serialize_to_version(self) -> VersionId:
        """The default serialize-to version (always set after validation)."""
        return self.default_serialize_to_version or self.current_version

    def describe(self) -> Dict[str, Any]:
        """JSON-friendly summary, with converters shown by name."""
        return {
            "current_version": self.current_version,
            "default_serialize_to_version": self.serialize_to_version,
            "property_name": self.property_name,
            "always_convert": self.always_convert,
            "to_current_converter": (
                converter_name(self.to_current_converter)
                if self.to_current_converter is not None else None
            ),
            "to_past_converter": (
                converter_name(self.to_past_converter)
                if self.to_past_converter is not None else None
            ),
            "serialize_to_version_attribute": self.serialize_to_version_attribute,
        }
