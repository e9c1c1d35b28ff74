"""Reference resolver -- the single post-pass over a fully built class graph.

:func:`resolve_references` runs exactly once, after every endpoint has been
built, in three passes:

1. **Placeholder substitution.** Every field type and response type that
   still points at a :class:`~specgen.typegraph.model.ClassReference` is
   replaced with the class the placeholder was registered with. A
   placeholder that was never registered (or only ever points back at
   itself) raises :class:`~specgen.exceptions.ResolutionError`.
2. **Structural deduplication.** Non-request classes with the same kind and
   the same field sequence (name, type, location, nullability, collection
   flag), compared recursively modulo class name, are merged into the one
   that was created first. Equivalence is computed by partition refinement,
   so cyclic look-alikes (``A1 <-> B1`` and ``A2 <-> B2``) merge too.
   Request classes are never merged.
3. **Pruning.** Merged-away classes are dropped, then any class with no
   remaining referrer that is not an endpoint's request or response is
   dropped, repeatedly until nothing changes. Placeholders are discarded.
"""

from __future__ import annotations

import logging
from typing import Hashable, Iterable, Iterator, Mapping

from specgen.exceptions import ResolutionError
from specgen.typegraph.model import (
    ClassModel,
    ClassReference,
    CollectionType,
    EndpointModel,
    TypeRef,
)
from specgen.typegraph.registry import TypeRegistry

logger = logging.getLogger(__name__)


def resolve_references(
    classes: list[ClassModel],
    registry: TypeRegistry,
    endpoints: list[EndpointModel],
    dedupe: bool = True,
) -> list[ClassModel]:
    """Resolve placeholders, merge equivalent classes, and prune the class set.

    Fields and endpoint methods are updated in place; the registry is
    repointed to the canonical classes and left without placeholders.

    Args:
        classes: Every class built during the run, in creation order.
        registry: The run's type registry.
        endpoints: Every endpoint built during the run.
        dedupe: Set to ``False`` to skip structural deduplication.

    Returns:
        The surviving classes, in creation order.

    Raises:
        ResolutionError: If a placeholder was never resolved.
    """
    unresolved = registry.unresolved()
    if unresolved:
        pointers = ", ".join(p.pointer for p in unresolved)
        raise ResolutionError(f"Unresolved class placeholder(s): {pointers}")

    _substitute_placeholders(classes, endpoints)

    replacements: dict[int, ClassModel] = {}
    if dedupe:
        replacements = _deduplicate(classes)
        if replacements:
            _repoint(classes, endpoints, replacements)
            registry.repoint(replacements)

    survivors = _prune(classes, endpoints, replacements)
    registry.discard_placeholders()
    registry.replace_classes(survivors)
    return survivors


# ----------------------------------------------------------------------
# Pass 1: placeholder substitution
# ----------------------------------------------------------------------


def _target_of(placeholder: ClassReference) -> TypeRef:
    seen: set[int] = set()
    current: TypeRef = placeholder
    while isinstance(current, ClassReference):
        if id(current) in seen:
            raise ResolutionError(
                f"Placeholder for '{placeholder.pointer}' only refers to itself"
            )
        seen.add(id(current))
        if current.target is None:
            raise ResolutionError(
                f"Placeholder for '{current.pointer}' was never resolved"
            )
        current = current.target
    return current


def _substitute(ref: TypeRef) -> TypeRef:
    if isinstance(ref, ClassReference):
        return _substitute(_target_of(ref))
    if isinstance(ref, CollectionType):
        item = _substitute(ref.item)
        return ref if item is ref.item else CollectionType(item=item)
    return ref


def _substitute_placeholders(
    classes: list[ClassModel], endpoints: list[EndpointModel]
) -> None:
    for cls in classes:
        for f in cls.fields:
            f.type = _substitute(f.type)
    for endpoint in endpoints:
        for method in endpoint.methods:
            if method.response_type is not None:
                method.response_type = _substitute(method.response_type)


# ----------------------------------------------------------------------
# Pass 2: structural deduplication
# ----------------------------------------------------------------------


def _shape(ref: TypeRef) -> Hashable:
    """Type key that ignores class identity."""
    if isinstance(ref, ClassModel):
        return ("class",)
    if isinstance(ref, CollectionType):
        return ("list", _shape(ref.item))
    return ("primitive", ref.value)  # type: ignore[union-attr]


def _keyed(ref: TypeRef, blocks: Mapping[int, int]) -> Hashable:
    """Type key that identifies classes by their current block."""
    if isinstance(ref, ClassModel):
        return ("class", blocks.get(id(ref), ("request", id(ref))))
    if isinstance(ref, CollectionType):
        return ("list", _keyed(ref.item, blocks))
    return ("primitive", ref.value)  # type: ignore[union-attr]


def _number(signatures: Iterable[tuple[ClassModel, Hashable]]) -> dict[int, int]:
    numbering: dict[Hashable, int] = {}
    blocks: dict[int, int] = {}
    for cls, signature in signatures:
        blocks[id(cls)] = numbering.setdefault(signature, len(numbering))
    return blocks


def _deduplicate(classes: list[ClassModel]) -> dict[int, ClassModel]:
    """Return a map from ``id()`` of each merged-away class to its canonical class."""
    candidates = [c for c in classes if not c.is_request]

    blocks = _number(
        (
            c,
            (
                c.kind,
                tuple(
                    (f.name, _shape(f.type), f.location, f.nullable, f.is_collection)
                    for f in c.fields
                ),
            ),
        )
        for c in candidates
    )
    while True:
        refined = _number(
            (c, (blocks[id(c)], tuple(_keyed(f.type, blocks) for f in c.fields)))
            for c in candidates
        )
        if len(set(refined.values())) == len(set(blocks.values())):
            break
        blocks = refined

    canonical: dict[int, ClassModel] = {}
    replacements: dict[int, ClassModel] = {}
    for cls in candidates:
        first = canonical.setdefault(blocks[id(cls)], cls)
        if first is not cls:
            replacements[id(cls)] = first
            logger.debug("Merging %s into %s", cls.qualified_name, first.qualified_name)
    return replacements


def _replace(ref: TypeRef, replacements: Mapping[int, ClassModel]) -> TypeRef:
    if isinstance(ref, ClassModel):
        return replacements.get(id(ref), ref)
    if isinstance(ref, CollectionType):
        item = _replace(ref.item, replacements)
        return ref if item is ref.item else CollectionType(item=item)
    return ref


def _repoint(
    classes: list[ClassModel],
    endpoints: list[EndpointModel],
    replacements: Mapping[int, ClassModel],
) -> None:
    for cls in classes:
        for f in cls.fields:
            f.type = _replace(f.type, replacements)
    for endpoint in endpoints:
        for method in endpoint.methods:
            if method.response_type is not None:
                method.response_type = _replace(method.response_type, replacements)


# ----------------------------------------------------------------------
# Pass 3: pruning
# ----------------------------------------------------------------------


def _classes_in(ref: TypeRef) -> Iterator[ClassModel]:
    if isinstance(ref, ClassModel):
        yield ref
    elif isinstance(ref, CollectionType):
        yield from _classes_in(ref.item)


def _prune(
    classes: list[ClassModel],
    endpoints: list[EndpointModel],
    replacements: Mapping[int, ClassModel],
) -> list[ClassModel]:
    roots: set[int] = set()
    for endpoint in endpoints:
        for method in endpoint.methods:
            roots.add(id(method.request_class))
            if method.response_type is not None:
                roots.update(id(c) for c in _classes_in(method.response_type))

    survivors = [c for c in classes if id(c) not in replacements]
    while True:
        referenced: set[int] = set()
        for cls in survivors:
            for f in cls.fields:
                referenced.update(
                    id(c) for c in _classes_in(f.type) if c is not cls
                )
        kept = [c for c in survivors if id(c) in roots or id(c) in referenced]
        if len(kept) == len(survivors):
            return kept
        for cls in survivors:
            if id(cls) not in roots and id(cls) not in referenced:
                logger.debug("Pruning unreferenced %s", cls.qualified_name)
        survivors = kept
