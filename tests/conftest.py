"""Shared test fixtures for the model_versioning test suite.

WHY: Several test modules need the same multi-version car documents and a
fresh registry/engine per test. Centralizing them here avoids duplication
and keeps the reference documents identical everywhere.

HOW: Fixtures build isolated registries and engines, and the nested
CarsByType JSON document from the reference cars in car_models.py.

RULES:
- Car models themselves live in car_models.py (registered on import)
- Tests that register their own models use the ``registry`` fixture, never
  the default registry
"""

import json

import pytest

from car_models import tagged
from model_versioning.core import ModelRegistry, VersioningEngine
from model_versioning.mapper import ModelMapper


@pytest.fixture
def registry():
    """An empty, isolated ModelRegistry."""
    return ModelRegistry()


@pytest.fixture
def engine(registry):
    """A VersioningEngine bound to the isolated registry."""
    return VersioningEngine(registry=registry)


@pytest.fixture
def mapper():
    """A ModelMapper over the default registry (car models)."""
    return ModelMapper()


@pytest.fixture
def cars_by_type_json():
    """A sedan container holding one car per version, in both tag styles."""
    return json.dumps({
        "type": "sedan",
        "cars": [tagged(v) for v in ("1", "2", "3", "4")],
        "customVersionedCars": [tagged(v, "_version") for v in ("1", "2", "3", "4")],
    })
