"""Resolution of the version an instance is serialized to.

WHY: Each serialize call must decide which version to emit. The model's
config supplies a default, but an instance may override it through one
declared accessor. Misdeclared accessors (two of them, or a non-text one)
are programmer errors and must fail on first use, even for instances
whose override value is null.

HOW: SerializeTargetResolver validates a type's accessor declarations
once and caches the single accessor (or None). resolve() reads it and
falls back to the configured default.

RULES:
- A non-null override always wins over default_serialize_to_version
- Validation runs once per (type, configured attribute), before any value
  is read
- The cache is written under a threading.Lock; reads are unlocked
- No config means the type is unversioned: resolve() returns None
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Tuple

from model_versioning.core.errors import AmbiguousOverrideError, InvalidOverrideTypeError
from model_versioning.core.model_config import VersionedModelConfig
from model_versioning.core.override import (
    OverrideAccessor,
    check_text_type,
    find_override_accessors,
)
from model_versioning.core.version import VersionId, parse_version

logger = logging.getLogger(__name__)

_CacheKey = Tuple[type, Optional[str]]


class SerializeTargetResolver:
    """Picks the serialize-to version for an instance.

    RULES:
    - accessor_for() raises AmbiguousOverrideError / InvalidOverrideTypeError
      for misdeclared types and never caches a failure
    """

    def __init__(self) -> None:
        self._accessors: Dict[_CacheKey, Optional[OverrideAccessor]] = {}
        self._lock = threading.Lock()

    def accessor_for(
        self,
        model_type: type,
        config: Optional[VersionedModelConfig] = None,
    ) -> Optional[OverrideAccessor]:
        """Return the validated override accessor of ``model_type``, or None."""
        attribute = config.serialize_to_version_attribute if config is not None else None
        key = (model_type, attribute)
        try:
            return self._accessors[key]
        except KeyError:
            pass

        accessors = find_override_accessors(model_type, attribute)
        if len(accessors) > 1:
            raise AmbiguousOverrideError(model_type, [a.name for a in accessors])

        accessor = accessors[0] if accessors else None
        if accessor is not None and not check_text_type(accessor.declared_type):
            raise InvalidOverrideTypeError(model_type, accessor.name, accessor.declared_type)

        with self._lock:
            self._accessors[key] = accessor
        if accessor is not None:
            logger.debug(
                "Serialize-to-version accessor for %s: %s (%s)",
                model_type.__qualname__, accessor.name, accessor.kind,
            )
        return accessor

    def read_override(
        self,
        instance: Any,
        config: Optional[VersionedModelConfig] = None,
    ) -> Optional[VersionId]:
        """Return the instance's override version, or None when unset."""
        accessor = self.accessor_for(type(instance), config)
        if accessor is None:
            return None

        value = accessor.read(instance)
        if value is None:
            return None
        if not isinstance(value, str):
            raise InvalidOverrideTypeError(type(instance), accessor.name, type(value))
        return parse_version(value, accessor.name)

    def resolve(
        self,
        instance: Any,
        config: Optional[VersionedModelConfig],
    ) -> Optional[VersionId]:
        """Return the version ``instance`` must be serialized to.

        Returns:
            The override value when set, else the configured default
            serialize-to version, or None for unversioned types.
        """
        if config is None:
            return None
        override = self.read_override(instance, config)
        if override is not None:
            return override
        return config.serialize_to_version

    def clear(self) -> None:
        with self._lock:
            self._accessors.clear()
