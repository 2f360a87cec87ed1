"""Typed exceptions raised by the versioning engine.

WHY: Every failure the engine can detect is a configuration or programmer
error (conflicting registration, missing converter, ambiguous override
accessor, malformed version tag). Callers need typed exceptions to tell
them apart from converter bugs, which propagate unchanged.

HOW: All engine errors derive from VersioningError. Each subclass keeps
the offending model type or value as attributes so callers and logs can
report them without parsing the message.

RULES:
- Errors are raised synchronously to the caller of register/(de)serialize
- Nothing here is retried or wrapped by the engine
- Converter-internal exceptions are never converted into these types
"""

from __future__ import annotations

from typing import Any, Optional


def _type_name(model_type: Any) -> str:
    return getattr(model_type, "__qualname__", repr(model_type))


class VersioningError(Exception):
    """Base class for all errors raised by model_versioning."""


class DuplicateRegistrationError(VersioningError):
    """Raised when a model type is registered twice with different configs.

    WHY: The registry is write-once per type. Silently replacing a config
    would change how already-emitted documents are read back.

    RULES:
    - Re-registering an identical config is not an error
    """

    def __init__(self, model_type: type) -> None:
        self.model_type = model_type
        super().__init__(
            "Model type {} is already registered with a different "
            "version configuration".format(_type_name(model_type))
        )


class MissingConverterError(VersioningError):
    """Raised when a conversion is required but no converter is configured.

    WHY: A document at a non-current version (or any document when
    always_convert is set) cannot be bound or emitted without the matching
    converter. Binding it unconverted would corrupt the model.

    RULES:
    - direction is "to_current" (deserialize) or "to_past" (serialize)
    """

    def __init__(
        self,
        model_type: type,
        direction: str,
        source_version: str,
        target_version: str,
    ) -> None:
        self.model_type = model_type
        self.direction = direction
        self.source_version = source_version
        self.target_version = target_version
        super().__init__(
            "Model type {} needs a {} converter to convert from version {} "
            "to version {}, but none is configured".format(
                _type_name(model_type), direction, source_version, target_version
            )
        )


class AmbiguousOverrideError(VersioningError):
    """Raised when a model type declares more than one serialize-to-version accessor."""

    def __init__(self, model_type: type, accessor_names: list[str]) -> None:
        self.model_type = model_type
        self.accessor_names = accessor_names
        super().__init__(
            "Model type {} declares multiple serialize-to-version accessors: "
            "{}".format(_type_name(model_type), ", ".join(accessor_names))
        )


class InvalidOverrideTypeError(VersioningError):
    """Raised when a serialize-to-version accessor does not yield text.

    RULES:
    - Raised for a non-text declared type (checked once per model type)
    - Also raised for a non-text runtime value of an unannotated accessor
    """

    def __init__(self, model_type: type, accessor_name: str, value_type: Any) -> None:
        self.model_type = model_type
        self.accessor_name = accessor_name
        self.value_type = value_type
        super().__init__(
            "Serialize-to-version accessor {}.{} must be text, got {}".format(
                _type_name(model_type), accessor_name, value_type
            )
        )


class MalformedVersionError(VersioningError):
    """Raised when a version tag or configured version is not a valid VersionId."""

    def __init__(self, value: Any, property_name: Optional[str] = None) -> None:
        self.value = value
        self.property_name = property_name
        where = " in field '{}'".format(property_name) if property_name else ""
        super().__init__(
            "Malformed model version{}: {!r} (expected an integer)".format(where, value)
        )


class BindingError(VersioningError):
    """Raised when a document tree cannot be bound to (or from) a model type.

    WHY: Binding failures (a required field missing, a scalar where a
    nested model is expected) otherwise surface as bare TypeErrors deep in
    a dataclass constructor, without the field path.

    RULES:
    - path is the dotted field path inside the document, if known
    """

    def __init__(self, model_type: Any, message: str, path: str = "") -> None:
        self.model_type = model_type
        self.path = path
        where = " at '{}'".format(path) if path else ""
        super().__init__(
            "Cannot bind {}{}: {}".format(_type_name(model_type), where, message)
        )
