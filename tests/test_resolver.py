"""Unit tests for serialize-to-version accessor discovery and resolution.

WHY: The resolver decides which version every instance is written at.
Precedence mistakes silently emit the wrong schema; missed ambiguity lets
two accessors disagree depending on declaration order.

HOW: Tests are organized by concern:
  - TestDiscovery: fields, methods, properties, explicit attributes, MRO
  - TestValidation: ambiguity and declared-type checks
  - TestResolve: override vs. default precedence, runtime value checks
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import pytest

from model_versioning.core import (
    AmbiguousOverrideError,
    InvalidOverrideTypeError,
    MalformedVersionError,
    SerializeTargetResolver,
    VersionedModelConfig,
    serialize_to_version,
    serialize_to_version_field,
)
from model_versioning.core.override import check_text_type, find_override_accessors


@dataclass
class Plain:
    name: str = "x"


@dataclass
class WithField:
    target: Optional[str] = serialize_to_version_field()


@dataclass
class WithMethod:
    target: Optional[str] = None

    @serialize_to_version
    def wanted_version(self) -> Optional[str]:
        return self.target


@dataclass
class WithProperty:
    target: Optional[str] = None

    @serialize_to_version
    @property
    def wanted_version(self) -> Optional[str]:
        return self.target


@dataclass
class InheritsMethod(WithMethod):
    extra: int = 0


class Untyped:
    """Not a dataclass; override named explicitly in the config."""

    def __init__(self, target=None):
        self.target = target


class UntypedMethod:

    def __init__(self, value):
        self.value = value

    @serialize_to_version
    def wanted_version(self):
        return self.value


@dataclass
class FieldAndAttribute:
    target: Optional[str] = serialize_to_version_field()
    other: Optional[str] = None


@dataclass
class IntegerMethod:

    @serialize_to_version
    def wanted_version(self) -> int:
        return 1


class BrokenProperty:

    @property
    @serialize_to_version
    def wanted_version(self) -> Optional[str]:
        return self.missing_target


DEFAULT_CONFIG = VersionedModelConfig(
    current_version="3",
    default_serialize_to_version="2",
    to_past_converter=lambda tree, v, t: tree,
)


@pytest.fixture
def resolver():
    return SerializeTargetResolver()


# =========================================================================
# Discovery
# =========================================================================

class TestDiscovery:
    """find_override_accessors() finds every declaration style."""

    def test_none_declared(self):
        assert find_override_accessors(Plain) == []

    @pytest.mark.parametrize("model_type, kind", [
        (WithField, "field"),
        (WithMethod, "method"),
        (WithProperty, "property"),
        (InheritsMethod, "method"),
    ])
    def test_single_accessor(self, model_type, kind):
        accessors = find_override_accessors(model_type)
        assert [a.kind for a in accessors] == [kind]

    def test_explicit_attribute(self):
        accessors = find_override_accessors(Untyped, "target")
        assert [(a.name, a.kind) for a in accessors] == [("target", "attribute")]
        assert not accessors[0].has_declared_type

    def test_explicit_attribute_matching_marked_field_is_one_accessor(self):
        assert len(find_override_accessors(WithField, "target")) == 1


class TestTextTypes:

    @pytest.mark.parametrize("declared", [
        str, Optional[str], Union[None, str], "Optional[str]", "str | None",
    ])
    def test_text_compatible(self, declared):
        assert check_text_type(declared)

    @pytest.mark.parametrize("declared", [int, Optional[int], Union[str, int], "int", bytes])
    def test_not_text(self, declared):
        assert not check_text_type(declared)


# =========================================================================
# Validation
# =========================================================================

class TestValidation:
    """Misdeclarations fail before any value is read."""

    def test_field_and_attribute_are_ambiguous(self, resolver):
        config = DEFAULT_CONFIG.model_copy(update={"serialize_to_version_attribute": "other"})
        with pytest.raises(AmbiguousOverrideError):
            resolver.resolve(FieldAndAttribute(), config)

    def test_wrong_declared_type(self, resolver):
        with pytest.raises(InvalidOverrideTypeError) as excinfo:
            resolver.resolve(IntegerMethod(), DEFAULT_CONFIG)
        assert excinfo.value.value_type is int

    def test_failure_is_not_cached(self, resolver):
        for _ in range(2):
            with pytest.raises(InvalidOverrideTypeError):
                resolver.accessor_for(IntegerMethod, DEFAULT_CONFIG)

    def test_accessor_is_cached(self, resolver):
        first = resolver.accessor_for(WithField, DEFAULT_CONFIG)
        assert resolver.accessor_for(WithField, DEFAULT_CONFIG) is first


# =========================================================================
# resolve()
# =========================================================================

class TestResolve:
    """Override beats default; default beats current."""

    @pytest.mark.parametrize("model_type", [WithField, WithMethod, WithProperty])
    def test_override_wins(self, resolver, model_type):
        assert resolver.resolve(model_type(target="1"), DEFAULT_CONFIG) == "1"

    @pytest.mark.parametrize("model_type", [WithField, WithMethod, WithProperty])
    def test_null_override_uses_default(self, resolver, model_type):
        assert resolver.resolve(model_type(), DEFAULT_CONFIG) == "2"

    def test_no_accessor_uses_default(self, resolver):
        assert resolver.resolve(Plain(), DEFAULT_CONFIG) == "2"

    def test_default_falls_back_to_current(self, resolver):
        assert resolver.resolve(Plain(), VersionedModelConfig(current_version="3")) == "3"

    def test_unversioned(self, resolver):
        assert resolver.resolve(Plain(), None) is None

    def test_override_is_canonicalized(self, resolver):
        assert resolver.resolve(WithField(target=" 01 "), DEFAULT_CONFIG) == "1"

    def test_malformed_override(self, resolver):
        with pytest.raises(MalformedVersionError):
            resolver.resolve(WithField(target="latest"), DEFAULT_CONFIG)

    def test_explicit_attribute(self, resolver):
        config = DEFAULT_CONFIG.model_copy(update={"serialize_to_version_attribute": "target"})
        assert resolver.resolve(Untyped("1"), config) == "1"
        assert resolver.resolve(Untyped(), config) == "2"

    def test_absent_explicit_attribute_uses_default(self, resolver):
        config = DEFAULT_CONFIG.model_copy(update={"serialize_to_version_attribute": "absent"})
        assert resolver.resolve(Plain(), config) == "2"

    def test_property_errors_propagate(self, resolver):
        with pytest.raises(AttributeError, match="missing_target"):
            resolver.resolve(BrokenProperty(), DEFAULT_CONFIG)

    def test_untyped_accessor_with_non_text_value(self, resolver):
        with pytest.raises(InvalidOverrideTypeError):
            resolver.resolve(UntypedMethod(1), DEFAULT_CONFIG)
        assert resolver.resolve(UntypedMethod("1"), DEFAULT_CONFIG) == "1"
