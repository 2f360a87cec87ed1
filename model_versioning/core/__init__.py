"""Core versioning engine, registry, and document model.

WHY: The core package contains the stable heart of the library: the
version configuration, the registry, the serialize-target resolver, the
conversion engine, and the document tree converters operate on.

HOW: version.py defines VersionId parsing and ordering, model_config.py
the per-type config, registry.py the type -> config map, override.py and
resolver.py the serialize-to-version accessor handling, engine.py the
two conversion flows, binding.py the dataclass binding, tree.py the
DocumentTree.

RULES:
- Nothing in core performs I/O
- Registration is setup-time only; everything else is read-only
"""

from model_versioning.core.binding import DataclassBinder, document_field
from model_versioning.core.converter import VersionedModelConverter
from model_versioning.core.engine import VersioningEngine
from model_versioning.core.errors import (
    AmbiguousOverrideError,
    BindingError,
    DuplicateRegistrationError,
    InvalidOverrideTypeError,
    MalformedVersionError,
    MissingConverterError,
    VersioningError,
)
from model_versioning.core.model_config import VersionedModelConfig
from model_versioning.core.override import serialize_to_version, serialize_to_version_field
from model_versioning.core.registry import ModelRegistry, default_registry, versioned_model
from model_versioning.core.resolver import SerializeTargetResolver
from model_versioning.core.tree import DocumentTree
from model_versioning.core.version import VersionId, compare_versions, parse_version

__all__ = [
    "AmbiguousOverrideError",
    "BindingError",
    "DataclassBinder",
    "DocumentTree",
    "DuplicateRegistrationError",
    "InvalidOverrideTypeError",
    "MalformedVersionError",
    "MissingConverterError",
    "ModelRegistry",
    "SerializeTargetResolver",
    "VersionId",
    "VersionedModelConfig",
    "VersionedModelConverter",
    "VersioningEngine",
    "VersioningError",
    "compare_versions",
    "default_registry",
    "document_field",
    "parse_version",
    "serialize_to_version",
    "serialize_to_version_field",
    "versioned_model",
]
