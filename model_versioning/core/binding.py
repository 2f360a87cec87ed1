"""Object <-> document tree binding for dataclass models.

WHY: The engine converts documents, but someone has to turn a converted
tree into a typed instance and back. Models in this codebase are plain
dataclasses (like the rest of the IR), optionally with from_dict/to_dict
for hand-written shapes.

HOW: DataclassBinder walks dataclasses.fields() with resolved type hints.
Scalars are copied through; lists, dicts, and Optional are unwrapped;
nested model values are handed to a callback so the engine can convert
each nested document with its own version configuration.

RULES:
- Tree fields the model does not declare are ignored (converters may add
  debug fields freely)
- A missing field with no default raises BindingError
- A field whose annotation cannot be resolved binds only null; any other
  value raises BindingError naming the field
- document_field(name=...) maps a dataclass field to a different tree key
- document_field(ignore=True) and serialize-to-version fields are never
  bound or emitted
- None values are emitted as null (not omitted)
- Types with from_dict/to_dict are bound through those methods
"""

from __future__ import annotations

import dataclasses
import sys
import typing
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from model_versioning.core.errors import BindingError
from model_versioning.core.override import is_override_field, is_union_type
from model_versioning.core.tree import DocumentTree

FIELD_NAME = "model_versioning.name"
FIELD_IGNORE = "model_versioning.ignore"

LoadNested = Callable[[Mapping, type], Any]
DumpNested = Callable[[Any], Dict[str, Any]]

_UNRESOLVED = object()


def document_field(
    name: Optional[str] = None,
    ignore: bool = False,
    **kwargs: Any,
) -> Any:
    """dataclasses.field() with a document key alias and/or ignore flag."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    if name is not None:
        metadata[FIELD_NAME] = name
    if ignore:
        metadata[FIELD_IGNORE] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def is_model_type(tp: Any) -> bool:
    """True for dataclass types and classes exposing from_dict/to_dict."""
    if not isinstance(tp, type):
        return False
    if dataclasses.is_dataclass(tp):
        return True
    return callable(getattr(tp, "from_dict", None)) and callable(getattr(tp, "to_dict", None))


def is_model_instance(value: Any) -> bool:
    return not isinstance(value, type) and is_model_type(type(value))


def _bound_fields(model_type: type):
    for f in dataclasses.fields(model_type):
        if is_override_field(f) or f.metadata.get(FIELD_IGNORE):
            continue
        yield f, f.metadata.get(FIELD_NAME, f.name)


def _type_hints(model_type: type) -> dict:
    """Resolved field annotations of a dataclass.

    A field whose annotation names something missing at runtime (an import
    guarded by TYPE_CHECKING, say) maps to _UNRESOLVED. The other fields
    are still resolved.
    """
    try:
        return typing.get_type_hints(model_type)
    except NameError:
        pass
    return {f.name: _resolve_annotation(f.type, model_type) for f in dataclasses.fields(model_type)}


def _resolve_annotation(annotation: Any, model_type: type) -> Any:
    def holder():
        pass

    holder.__annotations__ = {"value": annotation}
    # base-class fields resolve in the namespace of the class declaring them
    for klass in model_type.__mro__[:-1]:
        module = sys.modules.get(klass.__module__)
        globalns = vars(module) if module is not None else {}
        try:
            return typing.get_type_hints(holder, globalns, dict(vars(klass)))["value"]
        except NameError:
            continue
    return _UNRESOLVED


def _join(path: str, key: Any) -> str:
    if isinstance(key, int):
        return "{}[{}]".format(path, key)
    return "{}.{}".format(path, key) if path else str(key)


class DataclassBinder:
    """Binds document trees to dataclass instances and back.

    RULES:
    - bind() never mutates the tree it is given
    - unbind() returns a fresh DocumentTree in field declaration order
    """

    def bind(
        self,
        tree: Mapping,
        model_type: type,
        load_nested: LoadNested,
        path: str = "",
    ) -> Any:
        """Build a ``model_type`` instance from ``tree``.

        Args:
            tree: The (already converted) document fields.
            model_type: Target dataclass or from_dict type.
            load_nested: Called for each nested model value as
                         ``load_nested(mapping, nested_type)``.
            path: Dotted path of ``tree`` inside the root document, for errors.

        Raises:
            BindingError: On a missing required field, a non-mapping value
                for a nested model, or an unsupported model type.
        """
        if not is_model_type(model_type):
            raise BindingError(model_type, "not a dataclass or from_dict type", path)

        data = tree.to_dict() if isinstance(tree, DocumentTree) else dict(tree)
        if not dataclasses.is_dataclass(model_type):
            return model_type.from_dict(data)

        hints = _type_hints(model_type)
        kwargs: Dict[str, Any] = {}
        for f, key in _bound_fields(model_type):
            if not f.init:
                continue
            if key not in data:
                if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                    raise BindingError(model_type, "missing required field", _join(path, key))
                continue
            tp = hints.get(f.name, Any)
            if tp is _UNRESOLVED:
                if data[key] is not None:
                    raise BindingError(
                        model_type,
                        "cannot resolve annotation {!r}".format(f.type),
                        _join(path, key),
                    )
                tp = Any
            kwargs[f.name] = self._load(data[key], tp, load_nested, _join(path, key))
        return model_type(**kwargs)

    def _load(self, value: Any, tp: Any, load_nested: LoadNested, path: str) -> Any:
        if value is None or tp is Any:
            return value

        origin = typing.get_origin(tp)
        args = typing.get_args(tp)

        if is_union_type(tp):
            members = [a for a in args if a is not type(None)]
            if len(members) == 1:
                return self._load(value, members[0], load_nested, path)
            return value

        if origin in (list, tuple, set, frozenset):
            if not isinstance(value, list):
                raise BindingError(tp, "expected a list", path)
            item_type = args[0] if args else Any
            items = [
                self._load(item, item_type, load_nested, _join(path, i))
                for i, item in enumerate(value)
            ]
            return items if origin is list else origin(items)

        if origin is dict:
            if not isinstance(value, Mapping):
                raise BindingError(tp, "expected an object", path)
            value_type = args[1] if len(args) == 2 else Any
            return {
                k: self._load(v, value_type, load_nested, _join(path, k))
                for k, v in value.items()
            }

        if is_model_type(tp):
            if not isinstance(value, Mapping):
                raise BindingError(tp, "expected an object", path)
            return load_nested(value, tp)

        if tp is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        return value

    def unbind(self, instance: Any, dump_nested: DumpNested) -> DocumentTree:
        """Emit ``instance`` as a current-version DocumentTree.

        Args:
            instance: A dataclass or to_dict model instance.
            dump_nested: Called for each nested model instance; returns its
                         emitted fields as a plain dict.
        """
        model_type = type(instance)
        if not is_model_type(model_type):
            raise BindingError(model_type, "not a dataclass or to_dict type")
        if not dataclasses.is_dataclass(model_type):
            return DocumentTree(instance.to_dict())

        tree = DocumentTree()
        for f, key in _bound_fields(model_type):
            tree.put(key, self._dump(getattr(instance, f.name), dump_nested))
        return tree

    def _dump(self, value: Any, dump_nested: DumpNested) -> Any:
        if is_model_instance(value):
            return dump_nested(value)
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._dump(item, dump_nested) for item in value]
        if isinstance(value, Mapping):
            return {k: self._dump(v, dump_nested) for k, v in value.items()}
        return value
