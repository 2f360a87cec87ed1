"""Serialize-to-version override markers and accessor discovery.

WHY: Some instances must be written at a version other than the model's
default (e.g. a client that still speaks version 1). The model declares
one accessor that yields an optional per-instance target version. Two
such accessors, or one that yields something other than text, is a
programmer error that must fail loudly, not be resolved silently.

HOW: Three ways to declare the accessor:
  serialize_to_version_field():  a dataclass field marked via metadata
  @serialize_to_version:        a method or property marked with an attribute
  serialize_to_version_attribute=... in the model's config: explicit name
find_override_accessors() collects every declared accessor for a type
(walking the MRO), and check_text_type() validates its declared type.

RULES:
- Marked fields and methods are discovered across the whole class hierarchy
- A subclass member shadows a base-class member of the same name
- Declared types str, Optional[str], and str subclasses are text-compatible
- Unannotated accessors pass the declaration check; their values are
  checked when read
- Marked dataclass fields are never bound or emitted as payload
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from typing import Any, List, Optional

SERIALIZE_TO_VERSION = "model_versioning.serialize_to_version"
"""Metadata key / function attribute marking a serialize-to-version accessor."""

_UNDECLARED = object()

_TEXT_ANNOTATIONS = frozenset({
    "str",
    "Optional[str]",
    "typing.Optional[str]",
    "Union[str,None]",
    "Union[None,str]",
    "typing.Union[str,None]",
    "str|None",
    "None|str",
})


def serialize_to_version(member: Any) -> Any:
    """Mark a method or property as the serialize-to-version accessor.

    Usable on a plain method (called with no arguments at serialize time)
    or on a property, in either decorator order::

        @property
        @serialize_to_version
        def serialize_to(self) -> Optional[str]: ...
    """
    if isinstance(member, property):
        if member.fget is None:
            raise TypeError("serialize_to_version property has no getter")
        setattr(member.fget, SERIALIZE_TO_VERSION, True)
        return member
    if not callable(member):
        raise TypeError(
            "@serialize_to_version applies to methods and properties, "
            "use serialize_to_version_field() for dataclass fields"
        )
    setattr(member, SERIALIZE_TO_VERSION, True)
    return member


def serialize_to_version_field(default: Any = None, **kwargs: Any) -> Any:
    """A dataclass field holding the instance's optional serialize-to version."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[SERIALIZE_TO_VERSION] = True
    return dataclasses.field(default=default, metadata=metadata, **kwargs)


def is_override_field(f: dataclasses.Field) -> bool:
    return bool(f.metadata.get(SERIALIZE_TO_VERSION))


@dataclass(frozen=True)
class OverrideAccessor:
    """One declared serialize-to-version accessor on a model type.

    RULES:
    - kind is "field", "attribute", "property", or "method"
    - read() lets errors from methods and properties propagate; only an
      absent "attribute" reads as None
    - declared_type is the resolved annotation, a raw string annotation
      when it cannot be resolved, or _UNDECLARED
    """

    name: str
    kind: str
    declared_type: Any = _UNDECLARED

    @property
    def has_declared_type(self) -> bool:
        return self.declared_type is not _UNDECLARED

    def read(self, instance: Any) -> Any:
        if self.kind == "method":
            return getattr(instance, self.name)()
        if self.kind == "attribute":
            return getattr(instance, self.name, None)
        return getattr(instance, self.name)


def _hints(obj: Any) -> dict:
    """Type hints of a class or function, falling back to raw annotations."""
    try:
        return typing.get_type_hints(obj)
    except Exception:
        return dict(getattr(obj, "__annotations__", {}) or {})


def _is_marked(func: Any) -> bool:
    return bool(getattr(func, SERIALIZE_TO_VERSION, False))


def find_override_accessors(
    model_type: type,
    attribute_name: Optional[str] = None,
) -> List[OverrideAccessor]:
    """Collect every serialize-to-version accessor declared on ``model_type``.

    Args:
        model_type: The model class to inspect.
        attribute_name: Accessor name registered explicitly in the model's
                        config, if any.

    Returns:
        Accessors in discovery order: dataclass fields first, then
        methods/properties from the most derived class up, then the
        explicitly registered attribute (unless already found).
    """
    accessors: List[OverrideAccessor] = []
    class_hints = _hints(model_type)
    field_names = set()

    if dataclasses.is_dataclass(model_type):
        for f in dataclasses.fields(model_type):
            field_names.add(f.name)
            if is_override_field(f):
                accessors.append(OverrideAccessor(
                    name=f.name,
                    kind="field",
                    declared_type=class_hints.get(f.name, f.type),
                ))

    seen = set(field_names)
    for klass in model_type.__mro__:
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(member, property) and _is_marked(member.fget):
                accessors.append(OverrideAccessor(
                    name=name,
                    kind="property",
                    declared_type=_hints(member.fget).get("return", _UNDECLARED),
                ))
            elif callable(member) and not isinstance(member, type) and _is_marked(member):
                accessors.append(OverrideAccessor(
                    name=name,
                    kind="method",
                    declared_type=_hints(member).get("return", _UNDECLARED),
                ))

    if attribute_name and attribute_name not in {a.name for a in accessors}:
        accessors.append(OverrideAccessor(
            name=attribute_name,
            kind="attribute",
            declared_type=class_hints.get(attribute_name, _UNDECLARED),
        ))

    return accessors


def check_text_type(declared_type: Any) -> bool:
    """True if a declared accessor type can only yield text or None."""
    if declared_type is _UNDECLARED or declared_type is Any:
        return True
    if isinstance(declared_type, str):
        return declared_type.replace(" ", "") in _TEXT_ANNOTATIONS
    if isinstance(declared_type, type):
        return issubclass(declared_type, str)

    args = typing.get_args(declared_type)
    if args and is_union_type(declared_type):
        members = [a for a in args if a is not type(None)]
        return bool(members) and all(check_text_type(a) for a in members)
    return False


def is_union_type(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    if origin is typing.Union:
        return True
    # PEP 604 unions (str | None) on 3.10+
    union_type = getattr(types, "UnionType", None)
    return union_type is not None and origin is union_type
