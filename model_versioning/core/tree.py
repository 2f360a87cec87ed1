"""Mutable document tree shared by the parser, converters, and binder.

WHY: Converters need a small, encoding-agnostic surface to reshape a
record: read a field, write a field, remove a field. They should not care
whether the document came from JSON or was produced by unbinding a model
instance.

HOW: DocumentTree is a MutableMapping over a plain dict of named fields.
Values are heterogeneous (text, bool, numbers, lists, nested dicts). On
top of the mapping protocol it offers the converter-facing helpers
get/put/remove plus get_text/get_bool coercions, and JSON helpers for the
mapper and CLI.

RULES:
- put() stores the value as given; nested DocumentTrees are unwrapped to dicts
- remove() returns the removed value, or None when the field is absent
- get_text() renders booleans as "true"/"false" (JSON spelling)
- get_bool() accepts only "true"/"false" text (case-insensitive) and bools
- to_dict() returns a deep copy; the tree never shares nested containers
  with the dict it returns
"""

from __future__ import annotations

import copy
import json
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any, Optional, Union


def _unwrap(value: Any) -> Any:
    if isinstance(value, DocumentTree):
        return value.to_dict()
    return value


class DocumentTree(MutableMapping):
    """A tree of named fields with get/put/remove by name.

    WHY: This is the sole surface converter functions operate on. Keeping
    it a MutableMapping means converters can also use ordinary dict idioms
    (``"make" in tree``, ``tree["year"]``) when that reads better.

    RULES:
    - Field order is preserved (insertion order, like dict)
    - Nested objects are stored as dicts; use get_tree() for a tree view
    """

    def __init__(self, fields: Optional[Mapping[str, Any]] = None) -> None:
        self._fields: dict[str, Any] = {}
        if fields is not None:
            for name, value in fields.items():
                self._fields[name] = _unwrap(value)

    # -- mapping protocol --------------------------------------------------

    def __getitem__(self, name: str) -> Any:
        return self._fields[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._fields[name] = _unwrap(value)

    def __delitem__(self, name: str) -> None:
        del self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DocumentTree):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return "DocumentTree({!r})".format(self._fields)

    # -- converter helpers -------------------------------------------------

    def put(self, name: str, value: Any) -> DocumentTree:
        """Set a field, replacing any existing value. Returns self for chaining."""
        self[name] = value
        return self

    def remove(self, name: str) -> Any:
        """Remove a field and return its value (None when absent)."""
        return self._fields.pop(name, None)

    def has(self, name: str) -> bool:
        return name in self._fields

    def get_text(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return a field's value rendered as text.

        WHY: Old schemas often stored booleans and numbers as strings
        (``"new": "true"``). Converters read them uniformly as text.

        RULES:
        - Missing or null field returns default
        - bool renders as "true"/"false"; other scalars via str()
        - Nested objects and lists render as compact JSON
        """
        value = self._fields.get(name)
        if value is None:
            return default
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (dict, list)):
            return json.dumps(value, separators=(",", ":"))
        return str(value)

    def get_bool(self, name: str, default: bool = False) -> bool:
        """Return a field's value as a boolean.

        RULES:
        - bool values are returned as-is
        - Text "true"/"false" (any case, surrounding whitespace ignored) is parsed
        - Missing, null, or anything else returns default
        """
        value = self._fields.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
        return default

    def get_tree(self, name: str) -> Optional[DocumentTree]:
        """Return a nested object field as its own DocumentTree (a copy)."""
        value = self._fields.get(name)
        if isinstance(value, Mapping):
            return DocumentTree(copy.deepcopy(dict(value)))
        return None

    # -- conversion --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Deep copy of the fields as plain dicts and lists."""
        return copy.deepcopy(self._fields)

    def copy(self) -> DocumentTree:
        return DocumentTree(self.to_dict())

    @classmethod
    def from_json(cls, content: Union[str, bytes]) -> DocumentTree:
        """Parse a JSON object into a DocumentTree.

        Raises:
            ValueError: If the content is not valid JSON or its top level
                is not an object.
        """
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(
                "Expected a JSON object at the top level, got {}".format(
                    type(data).__name__
                )
            )
        return cls(data)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self._fields, indent=indent, ensure_ascii=False)
