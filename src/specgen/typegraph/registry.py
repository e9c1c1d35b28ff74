"""Type registry -- one class per schema pointer, with cycle-safe placeholders.

The registry is the single source of truth for "have we already built this
schema?" during a generation run. It maps canonical ``$ref`` pointers to the
class built for them and owns the ordered list of every class created.

Resolution follows a *placeholder first, fill later* discipline:

1. The first :meth:`TypeRegistry.resolve` of an unseen pointer records a
   :class:`~specgen.typegraph.model.ClassReference` as in progress and asks
   the model builder to build the pointed-to schema.
2. A cyclic re-entry into the same pointer while it is in progress gets that
   same placeholder back instead of recursing again.
3. :meth:`TypeRegistry.register` stores the real class. Object schemas
   register an empty stub *before* recursing into their properties, so most
   cycles see the real (still filling) class rather than the placeholder.
   The placeholder is kept alive and pointed at the class; the reference
   resolver later swaps every holder over to it.

A registry is created per run and passed explicitly through every recursive
build call; there is no process-wide state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping, Optional, Union

from specgen.exceptions import SchemaError
from specgen.models import SchemaNode
from specgen.typegraph.model import ClassModel, ClassReference, TypeRef

if TYPE_CHECKING:
    from specgen.typegraph.builder import ModelBuilder, PendingComposition

logger = logging.getLogger(__name__)


def pointer_name(pointer: str) -> str:
    """Return the last segment of a JSON pointer, unescaped per RFC 6901."""
    segment = pointer.rstrip("/").rsplit("/", 1)[-1]
    return segment.replace("~1", "/").replace("~0", "~")


class TypeRegistry:
    """Memoizing map from schema pointer to resolved class.

    Args:
        schemas: Every schema node a pointer may target, keyed by pointer
            (see :attr:`~specgen.models.ParsedSpec.schemas`).
        builder: The model builder invoked for pointers seen for the first
            time.
        package: Package prefix for qualified class names.
    """

    def __init__(
        self,
        schemas: Mapping[str, SchemaNode],
        builder: ModelBuilder,
        package: str,
    ) -> None:
        self._schemas = schemas
        self._builder = builder
        self.package = package
        self._registered: dict[str, TypeRef] = {}
        self._in_progress: dict[str, ClassReference] = {}
        self._placeholders: list[ClassReference] = []
        self._classes: list[ClassModel] = []
        self._names: set[str] = set()
        self._compositions: list[PendingComposition] = []

    # ------------------------------------------------------------------
    # Pointer resolution
    # ------------------------------------------------------------------

    def lookup(self, pointer: str) -> SchemaNode:
        """Return the schema node at *pointer*.

        Raises:
            SchemaError: If the pointer does not exist in the document.
        """
        node = self._schemas.get(pointer)
        if node is None:
            raise SchemaError(f"Cannot resolve $ref '{pointer}': not found in document")
        return node

    def get(self, pointer: str) -> Optional[TypeRef]:
        """Return what is currently known for *pointer* without building anything."""
        if pointer in self._registered:
            return self._registered[pointer]
        return self._in_progress.get(pointer)

    def resolve(self, pointer: str) -> Union[TypeRef, ClassReference]:
        """Return the class for *pointer*, building it on first use.

        Returns the registered class if the pointer has been built, the
        in-progress placeholder on a cyclic re-entry, and otherwise builds
        the schema (recording a placeholder first) and returns the result.

        Raises:
            SchemaError: If the pointer does not exist in the document.
        """
        known = self.get(pointer)
        if known is not None:
            return known

        node = self.lookup(pointer)
        placeholder = ClassReference(pointer=pointer)
        self._in_progress[pointer] = placeholder
        self._placeholders.append(placeholder)
        logger.debug("Building %s", pointer)

        built = self._builder.build(
            node, self, context=pointer_name(pointer), pointer=pointer
        )
        if pointer not in self._registered:
            self.register(pointer, built)
        return self._registered[pointer]

    def register(self, pointer: str, cls: TypeRef) -> None:
        """Record *cls* as the result for *pointer*.

        If a placeholder is in progress for the pointer it is kept alive and
        pointed at *cls*, so everything that already holds it can be
        repointed during reference resolution.
        """
        self._registered[pointer] = cls
        placeholder = self._in_progress.pop(pointer, None)
        if placeholder is not None and placeholder is not cls:
            placeholder.target = cls

    def registered(self) -> dict[str, TypeRef]:
        """Return a copy of the pointer-to-class table."""
        return dict(self._registered)

    # ------------------------------------------------------------------
    # Class set
    # ------------------------------------------------------------------

    def unique_name(self, simple_name: str) -> str:
        """Reserve and return a qualified name based on *simple_name*.

        Clashing names get a numeric suffix (``Item``, ``Item2``, ``Item3``)
        in creation order, which keeps the outcome deterministic.
        """
        base = f"{self.package}.{simple_name}" if self.package else simple_name
        candidate = base
        counter = 2
        while candidate in self._names:
            candidate = f"{base}{counter}"
            counter += 1
        self._names.add(candidate)
        return candidate

    def add_class(self, cls: ClassModel) -> ClassModel:
        """Append *cls* to the ordered class set and return it."""
        self._names.add(cls.qualified_name)
        self._classes.append(cls)
        return cls

    def all_classes(self) -> list[ClassModel]:
        """Return every class created so far, in creation order."""
        return list(self._classes)

    def placeholders(self) -> list[ClassReference]:
        """Return every placeholder handed out so far, in creation order."""
        return list(self._placeholders)

    def unresolved(self) -> list[ClassReference]:
        """Return placeholders that were never pointed at a class."""
        return [p for p in self._placeholders if not p.is_resolved]

    def defer_composition(self, pending: PendingComposition) -> None:
        """Queue a composite class for field merging by the builder."""
        self._compositions.append(pending)

    def take_compositions(self) -> list[PendingComposition]:
        """Return and clear the queued composite classes, in creation order."""
        taken, self._compositions = self._compositions, []
        return taken

    # ------------------------------------------------------------------
    # Resolver support
    # ------------------------------------------------------------------

    def repoint(self, replacements: Mapping[int, ClassModel]) -> None:
        """Swap registered classes for their canonical replacements.

        Args:
            replacements: Map from ``id()`` of a merged-away class to the
                canonical class that replaces it.
        """
        for pointer, cls in self._registered.items():
            canonical = replacements.get(id(cls))
            if canonical is not None:
                self._registered[pointer] = canonical

    def replace_classes(self, classes: list[ClassModel]) -> None:
        """Replace the class set with the resolver's final, pruned list."""
        self._classes = list(classes)

    def discard_placeholders(self) -> None:
        """Drop every placeholder once all holders have been repointed."""
        for pointer, entry in list(self._registered.items()):
            if isinstance(entry, ClassReference):
                seen = {id(entry)}
                target = entry.target
                while isinstance(target, ClassReference) and id(target) not in seen:
                    seen.add(id(target))
                    target = target.target
                if target is not None and not isinstance(target, ClassReference):
                    self._registered[pointer] = target
        self._placeholders.clear()
        self._in_progress.clear()
