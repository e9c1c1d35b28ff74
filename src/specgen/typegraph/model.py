"""Resolved type-graph data model.

Unlike the frozen input models in :mod:`specgen.models`, the objects here are
mutable dataclasses compared by identity: a :class:`ClassModel` may be
created as an empty stub and filled in later, and the graph it belongs to
may contain cycles (``A.b -> B``, ``B.a -> A``). Value equality or a
recursive ``repr`` would never terminate on such graphs, so neither is
generated for the graph nodes.

Type references used in fields and responses (:data:`TypeRef`) are one of:

* :class:`ClassModel` -- a named object, enum or alias class;
* :class:`PrimitiveType` -- a stateless tag, never registered as a class;
* :class:`CollectionType` -- an unnamed list wrapper around another reference;
* :class:`ClassReference` -- a placeholder for a class still being built.
  Placeholders only exist while the graph is under construction and are
  removed by :func:`~specgen.typegraph.resolver.resolve_references`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Union


class ClassKind(str, enum.Enum):
    """Kinds of generated class."""

    OBJECT = "object"
    ENUM = "enum"
    ALIAS = "alias"


class FieldLocation(str, enum.Enum):
    """Where a field's value travels on the wire.

    Request fields carry the parameter's location; response and schema
    fields always use ``NONE``.
    """

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"
    COOKIE = "cookie"
    NONE = "none"


class PrimitiveType(str, enum.Enum):
    """Primitive type tags."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_TIME = "date-time"


@dataclass(frozen=True)
class CollectionType:
    """A list of ``item``. Not a named class."""

    item: TypeRef


@dataclass(eq=False)
class FieldModel:
    """A single field of a :class:`ClassModel`.

    When ``is_collection`` is set, ``type`` is the element type of the list.
    """

    name: str
    type: TypeRef
    location: FieldLocation = FieldLocation.NONE
    nullable: bool = False
    is_collection: bool = False
    description: Optional[str] = None


@dataclass(eq=False)
class ClassModel:
    """A named, field-bearing type produced for a schema or parameter list.

    Identity is the object itself; ``qualified_name`` is unique within a
    generation run. Request classes (``is_request``) are owned by exactly
    one endpoint method and are never merged with other classes.
    """

    qualified_name: str
    kind: ClassKind = ClassKind.OBJECT
    fields: list[FieldModel] = field(default_factory=list, repr=False)
    is_request: bool = False
    pointer: Optional[str] = None
    description: Optional[str] = field(default=None, repr=False)

    @property
    def simple_name(self) -> str:
        """The last dotted segment of :attr:`qualified_name`."""
        return self.qualified_name.rsplit(".", 1)[-1]

    def get_field(self, name: str) -> Optional[FieldModel]:
        """Return the field called *name*, or ``None``."""
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(eq=False)
class ClassReference:
    """Placeholder for the class that will eventually back ``pointer``.

    Handed out by the type registry when a pointer is requested while it is
    still being built. ``target`` is filled in when the pointer is
    registered; the placeholder object itself stays alive so that every
    earlier holder can be repointed to the target later.
    """

    pointer: str
    target: Optional[TypeRef] = field(default=None, repr=False)

    @property
    def is_resolved(self) -> bool:
        return self.target is not None


TypeRef = Union[ClassModel, ClassReference, PrimitiveType, CollectionType]


@dataclass(eq=False)
class EndpointMethodModel:
    """One generated API method (a single path + HTTP method pair).

    ``request_class`` is built fresh for this method and never shared.
    ``response_type`` may be shared with any number of other methods that
    return the same schema; it is ``None`` for a no-content operation.
    """

    http_method: str
    path: str
    name: str
    request_class: ClassModel
    response_type: Optional[TypeRef] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    summary: Optional[str] = None
    operation_id: Optional[str] = None
    docs_url: Optional[str] = None
    deprecation_date: Optional[str] = None
    removal_date: Optional[str] = None
    previews: list[str] = field(default_factory=list)
    enabled_for_apps: bool = False
    cloud_only: bool = False
    deprecated: bool = False


@dataclass(eq=False)
class EndpointModel:
    """A named group of methods sharing a category."""

    class_name: str
    category: str
    methods: list[EndpointMethodModel] = field(default_factory=list)


@dataclass
class GenerationResult:
    """Output of a generation run: grouped endpoints plus the final class set."""

    endpoints: list[EndpointModel]
    classes: list[ClassModel]

    def find_class(self, qualified_name: str) -> Optional[ClassModel]:
        """Return the class with *qualified_name*, or ``None``."""
        for cls in self.classes:
            if cls.qualified_name == qualified_name:
                return cls
        return None

    def find_endpoint(self, class_name: str) -> Optional[EndpointModel]:
        """Return the endpoint whose generated class name is *class_name*, or ``None``."""
        for endpoint in self.endpoints:
            if endpoint.class_name == class_name:
                return endpoint
        return None
