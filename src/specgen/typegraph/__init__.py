"""Type-graph core -- registry, model builder, and reference resolver.

This sub-package turns parsed schema nodes into a deduplicated graph of
class models:

* :mod:`~specgen.typegraph.model` -- mutable graph dataclasses
  (:class:`ClassModel`, :class:`FieldModel`, placeholders, endpoints).
* :mod:`~specgen.typegraph.registry` -- :class:`TypeRegistry`, one class
  per ``$ref`` pointer with cycle-safe placeholders.
* :mod:`~specgen.typegraph.builder` -- :class:`ModelBuilder`, recursive
  dispatch over schema kinds.
* :mod:`~specgen.typegraph.resolver` -- :func:`resolve_references`,
  placeholder substitution, structural deduplication and pruning.
* :mod:`~specgen.typegraph.serialize` -- JSON-ready rendering of a result.
"""

from specgen.typegraph.builder import ModelBuilder
from specgen.typegraph.model import (
    ClassKind,
    ClassModel,
    ClassReference,
    CollectionType,
    EndpointMethodModel,
    EndpointModel,
    FieldLocation,
    FieldModel,
    GenerationResult,
    PrimitiveType,
)
from specgen.typegraph.registry import TypeRegistry
from specgen.typegraph.resolver import resolve_references

__all__ = [
    "ClassKind",
    "ClassModel",
    "ClassReference",
    "CollectionType",
    "EndpointMethodModel",
    "EndpointModel",
    "FieldLocation",
    "FieldModel",
    "GenerationResult",
    "ModelBuilder",
    "PrimitiveType",
    "TypeRegistry",
    "resolve_references",
]
