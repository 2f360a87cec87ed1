"""Converter contract shared by both conversion directions.

WHY: Conversion logic between versions is always author-supplied. Authors
write it either as a plain function or as a class (handy when several
helpers share state-free logic). The engine needs one way to call both.

HOW: VersionedModelConverter is the ABC for class-based converters.
ConverterRef is whatever a config may hold: a callable, a converter
instance, or a converter subclass. run_converter() resolves the reference,
calls it, and normalizes the result back into a DocumentTree.

RULES:
- Signature: (tree, model_version, target_model_version) -> tree
- Versions are passed as canonical VersionId text
- A converter may mutate the tree in place and return None; the engine
  then keeps using the tree it passed in
- A plain dict result is wrapped into a DocumentTree
- Converter subclasses are instantiated per call with no arguments
- Exceptions raised by converters propagate unchanged
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Optional, Type, Union

from model_versioning.core.tree import DocumentTree


class VersionedModelConverter(ABC):
    """Abstract base for class-based converters.

    To write a converter class:
    1. Subclass VersionedModelConverter
    2. Implement convert()
    3. Pass the class (or an instance) as to_current_converter or
       to_past_converter when registering the model
    """

    @abstractmethod
    def convert(
        self,
        tree: DocumentTree,
        model_version: str,
        target_model_version: str,
    ) -> Optional[DocumentTree]:
        """Reshape ``tree`` from ``model_version`` to ``target_model_version``.

        Args:
            tree: The document, owned by the converter for the duration of
                  the call. It must not be retained after returning.
            model_version: Version the document is currently shaped as.
            target_model_version: Version the document must be shaped as
                                  on return.

        Returns:
            The converted tree (usually ``tree`` itself), or None when the
            tree was converted in place.
        """

    def __call__(
        self,
        tree: DocumentTree,
        model_version: str,
        target_model_version: str,
    ) -> Optional[DocumentTree]:
        return self.convert(tree, model_version, target_model_version)


ConverterFunc = Callable[[DocumentTree, str, str], Optional[DocumentTree]]

ConverterRef = Union[ConverterFunc, VersionedModelConverter, Type[VersionedModelConverter]]


def is_converter_ref(value: Any) -> bool:
    """True if ``value`` can be used as a converter reference."""
    if isinstance(value, type):
        return issubclass(value, VersionedModelConverter)
    return callable(value)


def converter_name(ref: Any) -> str:
    if isinstance(ref, type):
        return ref.__qualname__
    return getattr(ref, "__qualname__", type(ref).__qualname__)


def run_converter(
    ref: ConverterRef,
    tree: DocumentTree,
    model_version: str,
    target_model_version: str,
) -> DocumentTree:
    """Invoke a converter reference and return the live tree.

    RULES:
    - The tree passed in must not be used by the caller afterwards; only
      the returned tree is live
    """
    converter: Any = ref() if isinstance(ref, type) else ref
    result = converter(tree, model_version, target_model_version)

    if result is None:
        return tree
    if isinstance(result, DocumentTree):
        return result
    if isinstance(result, Mapping):
        return DocumentTree(result)
    raise TypeError(
        "Converter {} returned {}, expected a DocumentTree, a mapping, or None".format(
            converter_name(ref), type(result).__name__
        )
    )
