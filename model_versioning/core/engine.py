"""Version-aware conversion engine.

WHY: This is the heart of the package. Incoming documents may be tagged
with any past (or future) version of a model; they must be upgraded to the
current shape before binding. Outgoing instances may need to be emitted at
an older version for consumers that have not upgraded yet.

HOW: Two flows, both driven by the model's registered config:
  deserialize: read + remove tag -> to_current converter -> bind
  serialize:   unbind -> resolve target -> to_past converter -> inject tag
Binding recurses through the engine, so nested models (inside unversioned
containers, lists, or other versioned models) are converted with their own
configuration.

RULES:
- Unregistered types pass through: bound/unbound as-is, no tag handling
- A missing tag means the document is at the current version; a null tag
  is malformed
- Converters run when versions differ or when always_convert is set;
  a required but missing converter raises MissingConverterError
- The tag is removed before binding and written last on serialize,
  overwriting any payload field of the same name
- Converter exceptions propagate unchanged
- The engine keeps no per-call state; one instance may serve many threads
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from model_versioning.core.binding import DataclassBinder
from model_versioning.core.converter import run_converter
from model_versioning.core.errors import MissingConverterError
from model_versioning.core.model_config import VersionedModelConfig
from model_versioning.core.registry import ModelRegistry, default_registry
from model_versioning.core.resolver import SerializeTargetResolver
from model_versioning.core.tree import DocumentTree
from model_versioning.core.version import VersionId, parse_version, versions_equal

logger = logging.getLogger(__name__)


class VersioningEngine:
    """Orchestrates tag handling, conversion, and binding.

    WHY: Callers (the mapper, the CLI, application code) need one object
    that knows the registry, the binder, and the target resolver.

    HOW: Holds references to the three collaborators. deserialize() and
    serialize() are the full flows; to_current() and to_version() expose
    the document-only halves for callers that never bind (the CLI).

    RULES:
    - registry defaults to default_registry
    - binder defaults to a DataclassBinder
    - resolver defaults to a fresh SerializeTargetResolver
    """

    def __init__(
        self,
        registry: Optional[ModelRegistry] = None,
        binder: Optional[DataclassBinder] = None,
        resolver: Optional[SerializeTargetResolver] = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry
        self.binder = binder if binder is not None else DataclassBinder()
        self.resolver = resolver if resolver is not None else SerializeTargetResolver()

    # ------------------------------------------------------------------
    # Deserialize
    # ------------------------------------------------------------------

    def deserialize(self, tree: Mapping, model_type: type) -> Any:
        """Upgrade ``tree`` to the current version of ``model_type`` and bind it.

        Args:
            tree: The parsed document. A DocumentTree is converted in place
                  and must not be reused by the caller; other mappings are
                  deep-copied first.
            model_type: The model class to bind into.

        Returns:
            A ``model_type`` instance.

        Raises:
            MalformedVersionError: The tag is present but not a valid version.
            MissingConverterError: Conversion is needed but no
                to_current_converter is configured.
            BindingError: The converted tree does not fit the model.
        """
        converted = self.to_current(tree, model_type)
        return self.binder.bind(converted, model_type, self._load_nested)

    def to_current(self, tree: Mapping, model_type: type) -> DocumentTree:
        """Remove the version tag and convert ``tree`` to the current version.

        Unregistered types get the tree back unchanged.
        """
        document = tree if isinstance(tree, DocumentTree) else DocumentTree(tree).copy()
        config = self.registry.lookup(model_type)
        if config is None:
            return document

        if document.has(config.property_name):
            # an explicit null is malformed, not "current"
            raw_version = document.remove(config.property_name)
            source_version = parse_version(raw_version, config.property_name)
        else:
            source_version = config.current_version

        return self._convert(
            document,
            model_type,
            config,
            source_version,
            config.current_version,
            "to_current",
        )

    def _load_nested(self, value: Mapping, model_type: type) -> Any:
        return self.deserialize(DocumentTree(value), model_type)

    # ------------------------------------------------------------------
    # Serialize
    # ------------------------------------------------------------------

    def serialize(self, instance: Any, model_type: Optional[type] = None) -> DocumentTree:
        """Unbind ``instance`` and down-convert it to its serialize-to version.

        Args:
            instance: The model instance to emit.
            model_type: The type whose config applies. Defaults to
                        ``type(instance)``.

        Returns:
            The emitted DocumentTree, tagged when the type is versioned.

        Raises:
            AmbiguousOverrideError: The type declares several
                serialize-to-version accessors.
            InvalidOverrideTypeError: The accessor is not text.
            MissingConverterError: Conversion is needed but no
                to_past_converter is configured.
        """
        model_type = model_type if model_type is not None else type(instance)
        config = self.registry.lookup(model_type)
        tree = self.binder.unbind(instance, self._dump_nested)
        if config is None:
            return tree

        target_version = self.resolver.resolve(instance, config)
        return self._emit(tree, model_type, config, target_version)

    def to_version(
        self,
        tree: Mapping,
        model_type: type,
        target_version: Optional[Any] = None,
    ) -> DocumentTree:
        """Down-convert a current-version ``tree`` and tag it.

        Args:
            tree: A document in the current shape, without a tag.
            model_type: The registered model type.
            target_version: Version to emit; defaults to the model's
                            default serialize-to version.

        Unregistered types get the tree back unchanged.
        """
        document = tree if isinstance(tree, DocumentTree) else DocumentTree(tree).copy()
        config = self.registry.lookup(model_type)
        if config is None:
            return document

        if target_version is None:
            target = config.serialize_to_version
        else:
            target = parse_version(target_version)
        return self._emit(document, model_type, config, target)

    def _emit(
        self,
        tree: DocumentTree,
        model_type: type,
        config: VersionedModelConfig,
        target_version: VersionId,
    ) -> DocumentTree:
        tree = self._convert(
            tree,
            model_type,
            config,
            config.current_version,
            target_version,
            "to_past",
        )
        tree.put(config.property_name, target_version)
        return tree

    def _dump_nested(self, instance: Any) -> Dict[str, Any]:
        return self.serialize(instance).to_dict()

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _convert(
        self,
        tree: DocumentTree,
        model_type: type,
        config: VersionedModelConfig,
        source_version: VersionId,
        target_version: VersionId,
        direction: str,
    ) -> DocumentTree:
        if versions_equal(source_version, target_version) and not config.always_convert:
            return tree

        converter = (
            config.to_current_converter if direction == "to_current"
            else config.to_past_converter
        )
        if converter is None:
            raise MissingConverterError(model_type, direction, source_version, target_version)

        logger.debug(
            "Converting %s %s: version %s -> %s",
            model_type.__qualname__, direction, source_version, target_version,
        )
        return run_converter(converter, tree, source_version, target_version)
