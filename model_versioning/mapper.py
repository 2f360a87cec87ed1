"""JSON facade over the versioning engine.

WHY: Most callers hold JSON text, not document trees. They want one call
to read a versioned model from JSON and one to write it back, the way an
object mapper works.

HOW: ModelMapper parses text into a DocumentTree, hands it to a
VersioningEngine, and renders emitted trees with the json module.

RULES:
- read_value() accepts str or bytes holding a JSON object
- write_value_as_string() never sorts keys; field order is declaration
  order followed by converter-added fields and the tag
- convert_value() returns plain dicts/lists, as JSON would decode them
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Type, TypeVar, Union

from model_versioning import config
from model_versioning.core.engine import VersioningEngine
from model_versioning.core.tree import DocumentTree

T = TypeVar("T")


class ModelMapper:
    """Reads and writes versioned models as JSON."""

    def __init__(self, engine: Optional[VersioningEngine] = None) -> None:
        self.engine = engine if engine is not None else VersioningEngine()

    def read_tree(self, content: Union[str, bytes]) -> DocumentTree:
        return DocumentTree.from_json(content)

    def read_value(self, content: Union[str, bytes], model_type: Type[T]) -> T:
        """Parse JSON ``content`` and deserialize it into ``model_type``."""
        return self.engine.deserialize(self.read_tree(content), model_type)

    def value_to_tree(self, instance: Any) -> DocumentTree:
        return self.engine.serialize(instance)

    def convert_value(self, instance: Any) -> Dict[str, Any]:
        """Serialize ``instance`` to plain dicts, as it would appear in JSON."""
        return self.value_to_tree(instance).to_dict()

    def write_value_as_string(self, instance: Any, indent: Optional[int] = None) -> str:
        """Serialize ``instance`` to JSON text.

        Args:
            instance: Model instance to emit.
            indent: JSON indentation; defaults to config.DEFAULT_JSON_INDENT.
        """
        if indent is None:
            indent = config.DEFAULT_JSON_INDENT
        return json.dumps(self.convert_value(instance), indent=indent, ensure_ascii=False)
