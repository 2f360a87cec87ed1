"""Tests for ModelMapper and the shape of emitted car documents.

WHY: The mapper is what applications call. Emitted documents must match
the published schema of the version they are tagged with, or consumers
on that version reject them.

HOW: Emitted car documents are validated with jsonschema against one
schema per car version. The schemas are strict (no additional payload
fields) except for the debug fields converters stamp.

RULES:
- Schemas describe the wire shape, not the Python model
"""

import json

import jsonschema
import pytest

from car_models import Car, FieldSerializeToCar, tagged
from model_versioning.core import DocumentTree, MalformedVersionError

_DEBUG_FIELDS = {
    "_debugPreDeserializationVersion": {"type": ["string", "null"]},
    "_debugPreSerializationVersion": {"type": "string"},
}

CAR_SCHEMAS = {
    "1": {
        "type": "object",
        "required": ["_version", "model", "year", "new"],
        "properties": dict(_DEBUG_FIELDS, **{
            "_version": {"const": "1"},
            "model": {"type": "string", "pattern": "^[^:]+:[^:]+$"},
            "year": {"type": "integer"},
            "new": {"enum": ["true", "false"]},
        }),
        "additionalProperties": False,
    },
    "2": {
        "type": "object",
        "required": ["_version", "make", "model", "year", "new"],
        "properties": dict(_DEBUG_FIELDS, **{
            "_version": {"const": "2"},
            "make": {"type": "string"},
            "model": {"type": "string", "pattern": "^[^:]+$"},
            "year": {"type": "integer"},
            "new": {"enum": ["true", "false"]},
        }),
        "additionalProperties": False,
    },
    "3": {
        "type": "object",
        "required": ["_version", "make", "model", "year", "used"],
        "properties": dict(_DEBUG_FIELDS, **{
            "_version": {"const": "3"},
            "make": {"type": "string"},
            "model": {"type": "string"},
            "year": {"type": "integer"},
            "used": {"type": "boolean"},
        }),
        "additionalProperties": False,
    },
}


class TestEmittedSchemas:
    """Every emitted version validates against that version's schema."""

    @pytest.mark.parametrize("version", ["1", "2", "3"])
    def test_emitted_document_matches_schema(self, mapper, version):
        car = FieldSerializeToCar(make="honda", model="civic", year=2016, used=True, s2v=version)
        data = json.loads(mapper.write_value_as_string(car))
        # Should not raise
        jsonschema.validate(instance=data, schema=CAR_SCHEMAS[version])

    @pytest.mark.parametrize("source", ["1", "2", "3"])
    @pytest.mark.parametrize("target", ["1", "2", "3"])
    def test_any_version_to_any_version(self, mapper, source, target):
        document = json.dumps(tagged(source, "_version"))
        car = mapper.read_value(document, FieldSerializeToCar)
        car.s2v = target
        data = json.loads(mapper.write_value_as_string(car))
        jsonschema.validate(instance=data, schema=CAR_SCHEMAS[target])


class TestMapper:

    def test_read_value_upgrades_version_1(self, mapper):
        car = mapper.read_value(
            '{"model": "honda:civic", "year": 2016, "new": "true", "modelVersion": "1"}', Car
        )
        assert car == Car(make="honda", model="civic", year=2016, used=False,
                          debug_pre_deserialization_version="1")

    def test_read_value_bytes(self, mapper):
        car = mapper.read_value(json.dumps(tagged("3")).encode("utf-8"), Car)
        assert car.make == "mazda"

    def test_read_tree(self, mapper):
        assert isinstance(mapper.read_tree('{"a": 1}'), DocumentTree)

    def test_write_value_indent(self, mapper):
        car = Car(make="mazda", model="6", year=2017, used=False)
        text = mapper.write_value_as_string(car, indent=2)
        assert text.startswith("{\n  ")
        assert json.loads(text)["modelVersion"] == "3"

    def test_malformed_tag(self, mapper):
        with pytest.raises(MalformedVersionError):
            mapper.read_value('{"make": "a", "model": "b", "year": 1, "used": true, '
                              '"modelVersion": true}', Car)
