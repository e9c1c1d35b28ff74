"""Model builder -- turn schema nodes into class models.

:class:`ModelBuilder` dispatches on :class:`~specgen.models.SchemaKind` and
recurses into nested schemas, consulting the
:class:`~specgen.typegraph.registry.TypeRegistry` for every ``$ref``. The
builder itself is stateless; all per-run state lives in the registry that is
passed through every call.

Dispatch rules:

* **reference** -- ``registry.resolve(pointer)``; whatever comes back (the
  real class or a placeholder) is returned as-is.
* **primitive** -- a :class:`~specgen.typegraph.model.PrimitiveType` tag.
* **array** -- a :class:`~specgen.typegraph.model.CollectionType` around the
  item type.
* **enum** -- an ``enum`` class with one pseudo-field per literal.
* **object** -- an empty stub is created (and registered under its pointer)
  *before* the properties are built, then one field per property is
  appended in declaration order.
* **composite** -- the members' fields are merged into one class.

Named component schemas (built with a ``pointer``) that are primitives or
arrays become single-field ``alias`` classes so that every pointer resolves
to a class.

Composite merging is deferred until :meth:`ModelBuilder.finish`: a member
class may still be filling its own fields when the composite is first seen
(``Node.children -> SpecialNode``, ``SpecialNode = allOf[Node, ...]``).
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from specgen.exceptions import CompositionError
from specgen.models import SchemaKind, SchemaNode
from specgen.naming import DefaultNamer, Namer
from specgen.typegraph.model import (
    ClassKind,
    ClassModel,
    ClassReference,
    CollectionType,
    FieldModel,
    PrimitiveType,
    TypeRef,
)
from specgen.typegraph.registry import TypeRegistry

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[str, PrimitiveType] = {
    "string": PrimitiveType.STRING,
    "integer": PrimitiveType.INTEGER,
    "number": PrimitiveType.NUMBER,
    "boolean": PrimitiveType.BOOLEAN,
}

_FORMATS: dict[tuple[str, str], PrimitiveType] = {
    ("string", "date"): PrimitiveType.DATE,
    ("string", "date-time"): PrimitiveType.DATE_TIME,
}

# A composite member is either a class (or a placeholder for one) or the
# fields of an inline object member.
_Part = Union[ClassModel, ClassReference, list[FieldModel]]


@dataclass(eq=False)
class PendingComposition:
    """A composite class whose fields are merged by :meth:`ModelBuilder.finish`."""

    cls: ClassModel
    parts: list[_Part]
    composition: str


def primitive_type(node: SchemaNode) -> PrimitiveType:
    """Map a node's JSON Schema ``type``/``format`` to a primitive tag.

    Unknown or missing types fall back to ``string``.
    """
    base = node.primitive or "string"
    if node.format:
        override = _FORMATS.get((base, node.format))
        if override is not None:
            return override
    return _PRIMITIVES.get(base, PrimitiveType.STRING)


def follow(ref: TypeRef) -> TypeRef:
    """Follow placeholder targets as far as they are known."""
    seen: set[int] = set()
    while isinstance(ref, ClassReference) and ref.target is not None:
        if id(ref) in seen:
            break
        seen.add(id(ref))
        ref = ref.target
    return ref


def same_type(
    a: TypeRef, b: TypeRef, assumed: Optional[set[tuple[int, int]]] = None
) -> bool:
    """Return True if *a* and *b* denote the same type.

    Two distinct classes are the same type when they have the same kind and
    field-for-field equal shapes. Cycles are handled by assuming a pair
    equal while its fields are being compared. Request classes only match
    themselves.
    """
    a, b = follow(a), follow(b)
    if isinstance(a, CollectionType) and isinstance(b, CollectionType):
        return same_type(a.item, b.item, assumed)
    if isinstance(a, PrimitiveType) or isinstance(b, PrimitiveType):
        return a == b
    if a is b:
        return True
    if not isinstance(a, ClassModel) or not isinstance(b, ClassModel):
        return False
    if assumed is None:
        assumed = set()
    pair = (id(a), id(b))
    if pair in assumed:
        return True
    if a.is_request or b.is_request or a.kind != b.kind or len(a.fields) != len(b.fields):
        return False
    assumed.add(pair)
    return all(
        fa.name == fb.name
        and fa.location == fb.location
        and fa.nullable == fb.nullable
        and fa.is_collection == fb.is_collection
        and same_type(fa.type, fb.type, assumed)
        for fa, fb in zip(a.fields, b.fields)
    )


def describe_type(ref: TypeRef) -> str:
    """Human-readable rendering of a type reference for error messages."""
    ref = follow(ref)
    if isinstance(ref, ClassModel):
        return ref.qualified_name
    if isinstance(ref, ClassReference):
        return f"<pending {ref.pointer}>"
    if isinstance(ref, CollectionType):
        return f"list[{describe_type(ref.item)}]"
    return ref.value


class ModelBuilder:
    """Builds class models from schema nodes.

    Args:
        namer: Identifier capability used to name classes. Defaults to
            :class:`~specgen.naming.DefaultNamer`.
    """

    def __init__(self, namer: Optional[Namer] = None) -> None:
        self.namer: Namer = namer or DefaultNamer()
        self._dispatch: dict[
            SchemaKind,
            Callable[[SchemaNode, TypeRegistry, str, Optional[str]], TypeRef],
        ] = {
            SchemaKind.REFERENCE: self._build_reference,
            SchemaKind.PRIMITIVE: self._build_primitive,
            SchemaKind.ARRAY: self._build_array,
            SchemaKind.ENUM: self._build_enum,
            SchemaKind.OBJECT: self._build_object,
            SchemaKind.COMPOSITE: self._build_composite,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str = "Anonymous",
        pointer: Optional[str] = None,
    ) -> TypeRef:
        """Build the type for *node*.

        Args:
            node: The schema to build.
            registry: The per-run type registry.
            context: Name used for the class when the schema declares none
                (usually the enclosing class name plus the property name).
            pointer: The schema's ``$ref`` pointer when it is a named
                component; the result is registered under it.

        Returns:
            A class, placeholder, primitive tag, or collection wrapper.

        Raises:
            SchemaError: If a reference pointer is not in the document.
            CompositionError: If composed members cannot be combined.
        """
        return self._dispatch[node.kind](node, registry, context, pointer)

    def build_field(
        self,
        owner: str,
        name: str,
        node: SchemaNode,
        registry: TypeRegistry,
    ) -> FieldModel:
        """Build a field called *name* of class *owner* from *node*.

        The field's location is ``none``; callers building request classes
        overwrite it.
        """
        ref = self.build(node, registry, context=owner + self.namer.type_name(name))
        return _make_field(name, ref, node.nullable, node.description)

    def finish(self, registry: TypeRegistry) -> None:
        """Merge the fields of every composite class built so far.

        Composites are completed members-first, so a composite of composites
        sees its members' merged fields.

        Raises:
            CompositionError: On incompatible same-named fields, or when
                composites are members of each other.
        """
        pending = {id(p.cls): p for p in registry.take_compositions()}
        done: set[int] = set()
        for item in list(pending.values()):
            self._complete(item, pending, done, visiting=set())

    # ------------------------------------------------------------------
    # Dispatch targets
    # ------------------------------------------------------------------

    def _build_reference(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str,
        pointer: Optional[str],
    ) -> TypeRef:
        assert node.reference is not None
        return registry.resolve(node.reference)

    def _build_primitive(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str,
        pointer: Optional[str],
    ) -> TypeRef:
        tag = primitive_type(node)
        if pointer is None:
            return tag
        alias = self._new_class(node, registry, context, ClassKind.ALIAS, pointer)
        alias.fields.append(_make_field("value", tag, node.nullable, None))
        return alias

    def _build_array(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str,
        pointer: Optional[str],
    ) -> TypeRef:
        alias = None
        if pointer is not None:
            # Registered first: an array component may contain itself.
            alias = self._new_class(node, registry, context, ClassKind.ALIAS, pointer)
        items = node.items or SchemaNode(kind=SchemaKind.PRIMITIVE, primitive="string")
        item_ref = self.build(items, registry, context=f"{context}Item")
        collection = CollectionType(item=item_ref)
        if alias is None:
            return collection
        alias.fields.append(_make_field("value", collection, node.nullable, None))
        return alias

    def _build_enum(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str,
        pointer: Optional[str],
    ) -> TypeRef:
        cls = self._new_class(node, registry, context, ClassKind.ENUM, pointer)
        tag = primitive_type(node)
        seen: set[str] = set()
        for literal in node.enum_values:
            if literal is None:
                continue
            rendered = str(literal).lower() if isinstance(literal, bool) else str(literal)
            if rendered in seen:
                logger.debug("Skipping repeated enum value %r in %s", literal, cls.qualified_name)
                continue
            seen.add(rendered)
            cls.fields.append(FieldModel(name=rendered, type=tag))
        return cls

    def _build_object(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str,
        pointer: Optional[str],
    ) -> TypeRef:
        cls = self._new_class(node, registry, context, ClassKind.OBJECT, pointer)
        for prop_name, prop in node.properties.items():
            cls.fields.append(
                self.build_field(cls.simple_name, prop_name, prop, registry)
            )
        return cls

    def _build_composite(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str,
        pointer: Optional[str],
    ) -> TypeRef:
        composition = node.composition or "allOf"
        name = self.namer.type_name(node.name or context)

        if len(node.members) == 1:
            return self.build(node.members[0], registry, context=name, pointer=pointer)

        parts: list[_Part] = []
        values: list[TypeRef] = []
        for index, member in enumerate(node.members, start=1):
            if member.kind == SchemaKind.OBJECT:
                parts.append(self._inline_fields(member, registry, name))
                continue
            ref = self.build(member, registry, context=f"{name}Part{index}")
            if _is_object_like(ref):
                parts.append(ref)  # type: ignore[arg-type]
            else:
                values.append(ref)

        if values:
            if composition == "allOf":
                rendered = ", ".join(describe_type(v) for v in values)
                raise CompositionError(
                    f"Cannot compose '{pointer or name}': allOf member(s) {rendered} "
                    "are not object schemas"
                )
            if not parts:
                first = values[0]
                if all(same_type(first, v) for v in values[1:]):
                    value = first
                else:
                    logger.debug(
                        "Widening %s of mixed primitives in %s to string", composition, name
                    )
                    value = PrimitiveType.STRING
                if pointer is None or isinstance(value, ClassModel):
                    return value
                alias = self._new_class(node, registry, context, ClassKind.ALIAS, pointer)
                alias.fields.append(_make_field("value", value, node.nullable, None))
                return alias
            logger.debug(
                "Dropping %d non-object %s alternative(s) in %s", len(values), composition, name
            )

        cls = self._new_class(node, registry, context, ClassKind.OBJECT, pointer)
        registry.defer_composition(
            PendingComposition(cls=cls, parts=parts, composition=composition)
        )
        return cls

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _new_class(
        self,
        node: SchemaNode,
        registry: TypeRegistry,
        context: str,
        kind: ClassKind,
        pointer: Optional[str],
    ) -> ClassModel:
        simple = self.namer.type_name(node.name or context)
        cls = ClassModel(
            qualified_name=registry.unique_name(simple),
            kind=kind,
            pointer=pointer,
            description=node.description,
        )
        registry.add_class(cls)
        if pointer is not None:
            registry.register(pointer, cls)
        return cls

    def _inline_fields(
        self, node: SchemaNode, registry: TypeRegistry, owner: str
    ) -> list[FieldModel]:
        return [
            self.build_field(owner, prop_name, prop, registry)
            for prop_name, prop in node.properties.items()
        ]

    def _complete(
        self,
        item: PendingComposition,
        pending: dict[int, PendingComposition],
        done: set[int],
        visiting: set[int],
    ) -> None:
        key = id(item.cls)
        if key in done:
            return
        if key in visiting:
            raise CompositionError(
                f"Circular composition involving '{item.cls.qualified_name}'"
            )
        visiting.add(key)

        member_fields: list[list[FieldModel]] = []
        for part in item.parts:
            if isinstance(part, list):
                member_fields.append(part)
                continue
            target = follow(part)
            if not isinstance(target, ClassModel) or target.kind != ClassKind.OBJECT:
                raise CompositionError(
                    f"Cannot compose '{item.cls.qualified_name}': member "
                    f"{describe_type(part)} is not an object schema"
                )
            if target is item.cls:
                raise CompositionError(
                    f"Circular composition: '{item.cls.qualified_name}' composes itself"
                )
            nested = pending.get(id(target))
            if nested is not None:
                self._complete(nested, pending, done, visiting)
            member_fields.append(target.fields)

        item.cls.fields = _merge_fields(item.cls.qualified_name, member_fields, item.composition)
        visiting.discard(key)
        done.add(key)


def _is_object_like(ref: TypeRef) -> bool:
    if isinstance(ref, ClassReference):
        # Still being built; verified when the composite is completed.
        return ref.target is None or _is_object_like(follow(ref))
    return isinstance(ref, ClassModel) and ref.kind == ClassKind.OBJECT


def _make_field(
    name: str, ref: TypeRef, nullable: bool, description: Optional[str]
) -> FieldModel:
    if isinstance(ref, CollectionType):
        return FieldModel(
            name=name,
            type=ref.item,
            nullable=nullable,
            is_collection=True,
            description=description,
        )
    return FieldModel(name=name, type=ref, nullable=nullable, description=description)


def _merge_fields(
    owner: str, members: list[list[FieldModel]], composition: str
) -> list[FieldModel]:
    """Merge member field lists in member order.

    Same-named fields must agree on type and collection-ness; their
    nullability is OR-ed and the first declaration keeps its position. For
    ``oneOf``/``anyOf`` a field not declared by every member is nullable.
    """
    merged: dict[str, FieldModel] = {}
    declared_by: dict[str, int] = {}
    for fields in members:
        for f in fields:
            existing = merged.get(f.name)
            if existing is None:
                merged[f.name] = dataclasses.replace(f)
                declared_by[f.name] = 1
                continue
            if existing.is_collection != f.is_collection or not same_type(existing.type, f.type):
                raise CompositionError(
                    f"Cannot compose '{owner}': field '{f.name}' is declared as "
                    f"{_describe_field(existing)} and {_describe_field(f)}"
                )
            existing.nullable = existing.nullable or f.nullable
            declared_by[f.name] += 1

    if composition != "allOf":
        for name, f in merged.items():
            if declared_by[name] < len(members):
                f.nullable = True
    return list(merged.values())


def _describe_field(f: FieldModel) -> str:
    rendered = describe_type(f.type)
    return f"list[{rendered}]" if f.is_collection else rendered
