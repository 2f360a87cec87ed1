"""Process-wide registry of versioned model types.

WHY: The engine needs a single lookup from a model type to its version
configuration. Registrations happen once, at model definition time (like
a plugin init step); every (de)serialize call afterwards only reads.

HOW: ModelRegistry wraps a dict keyed by type identity. Writes acquire a
threading.Lock; lookups are plain dict reads and walk the type's MRO so a
subclass of a registered model shares its configuration. The
versioned_model() class decorator builds a VersionedModelConfig and
registers the class in default_registry (or a given registry).

RULES:
- Register every model before the first (de)serialize call that needs it
- Re-registering an identical config is a no-op
- Re-registering a different config raises DuplicateRegistrationError
- lookup() returns None for unversioned types (no exceptions)
- A config registered on the class itself wins over one on a base class
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, TypeVar

from model_versioning.core.errors import DuplicateRegistrationError
from model_versioning.core.model_config import VersionedModelConfig

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)


class ModelRegistry:
    """Write-once-per-type map from model type to VersionedModelConfig.

    WHY: Single writer during setup, many concurrent readers afterwards.
    Locking only the write path keeps steady-state lookups free.

    RULES:
    - register() and unregister() acquire self._lock
    - lookup() never locks
    """

    def __init__(self) -> None:
        self._configs: Dict[type, VersionedModelConfig] = {}
        self._lock = threading.Lock()

    def register(self, model_type: type, config: VersionedModelConfig) -> VersionedModelConfig:
        """Store ``config`` for ``model_type``.

        Returns:
            The stored config (the existing one for an identical re-registration).

        Raises:
            DuplicateRegistrationError: If a different config is already
                registered for exactly this type.
        """
        if not isinstance(model_type, type):
            raise TypeError("model_type must be a class, got {!r}".format(model_type))

        with self._lock:
            existing = self._configs.get(model_type)
            if existing is not None:
                if existing == config:
                    return existing
                raise DuplicateRegistrationError(model_type)
            self._configs[model_type] = config

        logger.info(
            "Registered versioned model %s (current version %s, tag field '%s')",
            model_type.__qualname__,
            config.current_version,
            config.property_name,
        )
        return config

    def unregister(self, model_type: type) -> Optional[VersionedModelConfig]:
        """Remove a registration; returns the removed config, or None."""
        with self._lock:
            return self._configs.pop(model_type, None)

    def lookup(self, model_type: type) -> Optional[VersionedModelConfig]:
        """Return the config for ``model_type`` or its nearest registered base."""
        configs = self._configs
        for klass in getattr(model_type, "__mro__", (model_type,)):
            found = configs.get(klass)
            if found is not None:
                return found
        return None

    def registered_types(self) -> List[type]:
        return list(self._configs)

    def __contains__(self, model_type: object) -> bool:
        return isinstance(model_type, type) and self.lookup(model_type) is not None

    def __len__(self) -> int:
        return len(self._configs)


default_registry = ModelRegistry()
"""Registry used by versioned_model() and VersioningEngine when none is given."""


def versioned_model(
    current_version: Any,
    default_serialize_to_version: Any = None,
    property_name: Optional[str] = None,
    always_convert: bool = False,
    to_current_converter: Any = None,
    to_past_converter: Any = None,
    serialize_to_version_attribute: Optional[str] = None,
    registry: Optional[ModelRegistry] = None,
) -> Callable[[T], T]:
    """Class decorator registering a model type as versioned.

    Example::

        @versioned_model(current_version="3",
                         to_current_converter=to_current_car)
        @dataclass
        class Car:
            make: str
            model: str

    The config is validated immediately, so a malformed version or a
    non-callable converter fails at class definition time.
    """
    fields: Dict[str, Any] = {
        "current_version": current_version,
        "default_serialize_to_version": default_serialize_to_version,
        "always_convert": always_convert,
        "to_current_converter": to_current_converter,
        "to_past_converter": to_past_converter,
        "serialize_to_version_attribute": serialize_to_version_attribute,
    }
    if property_name is not None:
        fields["property_name"] = property_name
    config = VersionedModelConfig(**fields)
    target = registry if registry is not None else default_registry

    def decorator(cls: T) -> T:
        target.register(cls, config)
        return cls

    return decorator
