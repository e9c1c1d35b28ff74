"""Canonical Pydantic models shared across all specgen modules.

This is the single source of truth for the *input* data shapes of the
project. The resolved class graph produced from them lives in
:mod:`specgen.typegraph.model` instead, because it is mutable and may be
cyclic. The models here fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`GeneratorConfig`, :class:`OutputConfig`, and :class:`GlobalConfig`.

**Parser output models** -- produced by the OpenAPI spec parser and consumed by
the endpoint assembler:
    :class:`HTTPMethod`, :class:`SchemaKind`, :class:`SchemaNode`,
    :class:`APIParameter`, :class:`ResponseInfo`, :class:`OperationMetadata`,
    :class:`APIOperation`, :class:`APIInfo`, and :class:`ParsedSpec`.

Parser output models are frozen: the type-graph builder only ever reads them.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Generator Config ---


class GeneratorConfig(BaseModel):
    """Settings that shape the generated class graph.

    The package names prefix every qualified class name (``model_package``)
    and endpoint class name (``endpoint_package``). ``metadata_extension``
    names the operation-level vendor extension that carries category and
    lifecycle metadata.

    Example::

        GeneratorConfig(
            model_package="com.acme.model",
            endpoint_package="com.acme.client",
        )
    """

    model_package: str = Field(
        default="org.example.model", description="Package prefix for model classes"
    )
    endpoint_package: str = Field(
        default="org.example.client", description="Package prefix for endpoint classes"
    )
    metadata_extension: str = Field(
        default="x-github",
        description="Operation extension holding category and lifecycle metadata",
    )
    json_media_type: str = Field(
        default="application/json", description="Media type treated as structured JSON"
    )
    dedupe: bool = Field(
        default=True, description="Merge structurally identical classes"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )
    indent: int = Field(default=2, description="Indentation of emitted JSON")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specgen/config.json``.

    Loaded and saved by :func:`~specgen.config.load_global_config` and
    :func:`~specgen.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~specgen.config.resolve_config`
    for the full precedence chain.
    """

    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class SchemaKind(str, enum.Enum):
    """The closed set of shapes a :class:`SchemaNode` can take."""

    PRIMITIVE = "primitive"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"
    REFERENCE = "reference"
    COMPOSITE = "composite"


class SchemaNode(BaseModel):
    """One node of a parsed schema tree.

    Only the attributes relevant to ``kind`` are populated: ``reference``
    for references, ``properties`` for objects, ``items`` for arrays,
    ``enum_values`` for enums, and ``members`` plus ``composition`` for
    ``allOf``/``oneOf``/``anyOf`` composites. ``primitive`` and ``format``
    carry the JSON Schema ``type``/``format`` of primitives and enums.
    """

    model_config = ConfigDict(frozen=True)

    kind: SchemaKind
    name: Optional[str] = None
    reference: Optional[str] = None
    properties: dict[str, SchemaNode] = Field(default_factory=dict)
    items: Optional[SchemaNode] = None
    enum_values: list[Any] = Field(default_factory=list)
    members: list[SchemaNode] = Field(default_factory=list)
    composition: Optional[str] = Field(
        default=None, description="allOf, oneOf or anyOf"
    )
    primitive: Optional[str] = Field(
        default=None, description="JSON Schema type: string, integer, number, boolean"
    )
    format: Optional[str] = None
    nullable: bool = False
    description: Optional[str] = None


class APIParameter(BaseModel):
    """A single parameter of an operation.

    ``location`` is kept verbatim from the OpenAPI ``in`` field; mapping it
    onto a field location (and rejecting unknown values) is the assembler's
    job.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: Optional[str] = None
    location: Optional[str] = None
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")


class ResponseInfo(BaseModel):
    """Parsed response for a single HTTP status code.

    ``content`` maps each declared media type to its schema (``None`` when
    the media type declares no schema).
    """

    model_config = ConfigDict(frozen=True)

    status_code: str
    description: Optional[str] = None
    content: dict[str, Optional[SchemaNode]] = Field(default_factory=dict)


class OperationMetadata(BaseModel):
    """Vendor metadata attached to an operation.

    Read from the extension named by
    :attr:`GeneratorConfig.metadata_extension`. ``category`` drives endpoint
    grouping; the rest is lifecycle information passed through to the
    generated method descriptors.
    """

    model_config = ConfigDict(frozen=True)

    category: Optional[str] = None
    subcategory: Optional[str] = None
    deprecation_date: Optional[str] = None
    removal_date: Optional[str] = None
    previews: list[str] = Field(default_factory=list)
    enabled_for_apps: bool = False
    cloud_only: bool = False


class APIOperation(BaseModel):
    """A single parsed API operation (one URL path + HTTP method pair)."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[APIParameter] = Field(default_factory=list)
    responses: dict[str, ResponseInfo] = Field(default_factory=dict)
    docs_url: Optional[str] = None
    metadata: Optional[OperationMetadata] = None
    deprecated: bool = False


class APIInfo(BaseModel):
    """API metadata extracted from the OpenAPI spec's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None


class ParsedSpec(BaseModel):
    """Complete parsed representation of an OpenAPI specification.

    Produced by :func:`~specgen.parser.extractor.extract_spec` and consumed by
    :class:`~specgen.assembler.EndpointAssembler`. ``schemas`` indexes every
    schema a ``$ref`` pointer in the document can reach, keyed by the pointer
    string (e.g. ``"#/components/schemas/Organization"``).

    See Also:
        :class:`APIOperation`: Individual operation within the spec.
        :class:`SchemaNode`: Individual schema node.
    """

    info: APIInfo
    operations: list[APIOperation] = Field(default_factory=list)
    schemas: dict[str, SchemaNode] = Field(default_factory=dict)
    openapi_version: str = Field(
        description="Original OpenAPI version string (e.g., '3.0.3', '3.1.0')"
    )


SchemaNode.model_rebuild()
