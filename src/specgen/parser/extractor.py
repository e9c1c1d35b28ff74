"""Extract operations and the schema pointer table from a raw OpenAPI spec.

This module walks a raw OpenAPI document and builds a
:class:`~specgen.models.ParsedSpec`: every path + HTTP method pair becomes an
:class:`~specgen.models.APIOperation`, and every schema a ``$ref`` can reach
is converted into a :class:`~specgen.models.SchemaNode` and indexed by its
pointer in :attr:`~specgen.models.ParsedSpec.schemas`.

Schema ``$ref`` pointers are *not* inlined. They become ``reference`` nodes
so the type registry can build each named schema exactly once (and survive
cycles). Parameter, request body, and response objects are inlined.

The single public entry point is :func:`extract_spec`. Internally it
delegates to private helpers that each handle one section of the document:

* ``_extract_info`` -- the ``info`` object.
* ``_extract_operations`` -- the ``paths`` object, in document order.
* :class:`_SchemaConverter` -- schema dicts to nodes, collecting pointers.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specgen.exceptions import SchemaError
from specgen.models import (
    APIInfo,
    APIOperation,
    APIParameter,
    GeneratorConfig,
    HTTPMethod,
    OperationMetadata,
    ParsedSpec,
    ResponseInfo,
    SchemaKind,
    SchemaNode,
)
from specgen.parser.resolver import deref, resolve_pointer, split_pointer

logger = logging.getLogger(__name__)

# HTTP methods recognized by OpenAPI
_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

_COMPOSITIONS = ("allOf", "oneOf", "anyOf")

# A JSON request body is passed as this request field.
_BODY = "body"


def extract_spec(
    raw_spec: dict[str, Any],
    openapi_version: str,
    config: Optional[GeneratorConfig] = None,
) -> ParsedSpec:
    """Extract a :class:`~specgen.models.ParsedSpec` from a raw OpenAPI dict.

    Args:
        raw_spec: The raw OpenAPI spec dictionary as returned by
            :func:`~specgen.parser.loader.load_spec`.
        openapi_version: The validated OpenAPI version string (e.g.,
            ``"3.0.3"``), as returned by
            :func:`~specgen.parser.loader.validate_openapi_version`.
        config: Generator settings; only ``metadata_extension`` and
            ``json_media_type`` are read here.

    Returns:
        A :class:`~specgen.models.ParsedSpec` with operations in document
        order and the pointer-indexed schema table.

    Raises:
        SpecParseError: If the document uses an external ``$ref``.
        SchemaError: If a parameter or response ``$ref`` cannot be followed.

    Example::

        raw = load_spec("api.github.com.json")
        version = validate_openapi_version(raw)
        parsed = extract_spec(raw, version)
        for op in parsed.operations:
            print(f"{op.method.value.upper()} {op.path}")
    """
    config = config or GeneratorConfig()
    converter = _SchemaConverter(raw_spec)
    operations = _extract_operations(raw_spec, converter, config)
    return ParsedSpec(
        info=_extract_info(raw_spec),
        operations=operations,
        schemas=converter.index(),
        openapi_version=openapi_version,
    )


def _extract_info(spec: dict[str, Any]) -> APIInfo:
    info = spec.get("info") or {}
    return APIInfo(
        title=info.get("title", "Untitled API"),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
    )


# ----------------------------------------------------------------------
# Schemas
# ----------------------------------------------------------------------


class _SchemaConverter:
    """Converts schema dicts to nodes and indexes every pointer they reach."""

    def __init__(self, root: dict[str, Any]) -> None:
        self.root = root
        self._pending: list[str] = []
        self._seen: set[str] = set()

    def convert(self, schema: Any) -> SchemaNode:
        """Convert one schema object, recording the pointers it references."""
        if not isinstance(schema, dict):
            # ``true`` / ``{}``: anything goes, treated as a free-form object.
            return SchemaNode(kind=SchemaKind.OBJECT)

        description = schema.get("description")
        nullable = bool(schema.get("nullable", False))

        ref = schema.get("$ref")
        if isinstance(ref, str):
            split_pointer(ref)  # rejects external references early
            if ref not in self._seen:
                self._seen.add(ref)
                self._pending.append(ref)
            return SchemaNode(
                kind=SchemaKind.REFERENCE,
                reference=ref,
                nullable=nullable,
                description=description,
            )

        type_value = schema.get("type")
        # OpenAPI 3.1 allows type to be an array (e.g., ["string", "null"])
        if isinstance(type_value, list):
            nullable = nullable or "null" in type_value
            non_null = [t for t in type_value if t != "null"]
            type_value = non_null[0] if non_null else None

        for composition in _COMPOSITIONS:
            if composition in schema:
                members = [self.convert(m) for m in schema[composition] or []]
                if composition == "allOf" and schema.get("properties"):
                    members.append(self._object(schema, None, False))
                return SchemaNode(
                    kind=SchemaKind.COMPOSITE,
                    members=members,
                    composition=composition,
                    nullable=nullable,
                    description=description,
                )

        if "enum" in schema:
            values = list(schema.get("enum") or [])
            if None in values:
                nullable = True
            return SchemaNode(
                kind=SchemaKind.ENUM,
                enum_values=values,
                primitive=type_value or "string",
                format=schema.get("format"),
                nullable=nullable,
                description=description,
            )

        if type_value == "array" or "items" in schema:
            items = schema.get("items")
            return SchemaNode(
                kind=SchemaKind.ARRAY,
                items=self.convert(items) if items is not None else None,
                nullable=nullable,
                description=description,
            )

        if type_value in (None, "object") or "properties" in schema:
            return self._object(schema, description, nullable)

        return SchemaNode(
            kind=SchemaKind.PRIMITIVE,
            primitive=type_value,
            format=schema.get("format"),
            nullable=nullable,
            description=description,
        )

    def _object(
        self, schema: dict[str, Any], description: Optional[str], nullable: bool
    ) -> SchemaNode:
        properties = {
            name: self.convert(prop)
            for name, prop in (schema.get("properties") or {}).items()
        }
        if isinstance(schema.get("additionalProperties"), dict):
            # Map value types are not modelled; only declared properties become fields.
            logger.debug("Ignoring additionalProperties of object schema")
        return SchemaNode(
            kind=SchemaKind.OBJECT,
            properties=properties,
            nullable=nullable,
            description=description,
        )

    def index(self) -> dict[str, SchemaNode]:
        """Convert every pointer seen so far (transitively) into the table.

        Pointers that do not resolve are left out; the type registry reports
        them when a build actually needs one.
        """
        schemas: dict[str, SchemaNode] = {}
        while self._pending:
            pointer = self._pending.pop(0)
            try:
                target = resolve_pointer(pointer, self.root)
            except SchemaError:
                logger.debug("Leaving unresolvable pointer %s out of the index", pointer)
                continue
            schemas[pointer] = self.convert(target)
        return schemas


# ----------------------------------------------------------------------
# Operations
# ----------------------------------------------------------------------


def _extract_operations(
    spec: dict[str, Any],
    converter: _SchemaConverter,
    config: GeneratorConfig,
) -> list[APIOperation]:
    """Extract all operations from the spec's ``paths`` object.

    Paths and methods are visited in document order, so repeated runs over
    the same document produce operations in the same order.
    """
    paths = spec.get("paths") or {}
    operations: list[APIOperation] = []

    for path, path_item in paths.items():
        path_item = deref(path_item, spec)
        if not isinstance(path_item, dict):
            continue

        # Path-level parameters apply to all operations under this path
        path_params = _deref_all(path_item.get("parameters") or [], spec)

        for method_str, operation in path_item.items():
            if method_str not in _HTTP_METHODS or not isinstance(operation, dict):
                continue

            op_params = _deref_all(operation.get("parameters") or [], spec)
            parameters = [
                _extract_parameter(p, converter)
                for p in _merge_parameters(path_params, op_params)
            ]
            body = _extract_request_body(operation.get("requestBody"), spec, converter, config)
            if body is not None:
                parameters.append(body)

            docs = operation.get("externalDocs") or {}
            operations.append(
                APIOperation(
                    path=path,
                    method=HTTPMethod(method_str),
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    tags=list(operation.get("tags") or []),
                    parameters=parameters,
                    responses=_extract_responses(
                        operation.get("responses") or {}, spec, converter
                    ),
                    docs_url=docs.get("url") if isinstance(docs, dict) else None,
                    metadata=_extract_metadata(operation.get(config.metadata_extension)),
                    deprecated=bool(operation.get("deprecated", False)),
                )
            )

    return operations


def _deref_all(items: list[Any], spec: dict[str, Any]) -> list[dict[str, Any]]:
    resolved = (deref(item, spec) for item in items)
    return [item for item in resolved if isinstance(item, dict)]


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    op_keys = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in op_keys
    ]
    merged.extend(op_params)
    return merged


def _extract_parameter(param: dict[str, Any], converter: _SchemaConverter) -> APIParameter:
    """Convert a raw parameter dict.

    The schema comes from ``schema`` or, for content-encoded parameters, from
    the first media type that declares one. The ``in`` value is kept as-is.
    """
    raw_schema = param.get("schema")
    if raw_schema is None:
        for media in (param.get("content") or {}).values():
            if isinstance(media, dict) and "schema" in media:
                raw_schema = media["schema"]
                break

    location = param.get("in")
    required = bool(param.get("required", False))
    # Path parameters are always required in OpenAPI
    if location == "path":
        required = True

    return APIParameter(
        name=param.get("name"),
        location=location,
        required=required,
        description=param.get("description"),
        schema=converter.convert(raw_schema) if raw_schema is not None else None,
    )


def _extract_request_body(
    body: Any,
    spec: dict[str, Any],
    converter: _SchemaConverter,
    config: GeneratorConfig,
) -> Optional[APIParameter]:
    """Turn a JSON ``requestBody`` into a ``body`` parameter.

    Bodies without a JSON media type are not modelled and return ``None``.
    """
    if body is None:
        return None
    body = deref(body, spec)
    content = body.get("content") or {}
    media = content.get(config.json_media_type)
    if not isinstance(media, dict):
        if content:
            logger.debug("Ignoring non-JSON request body (%s)", ", ".join(content))
        return None

    # A missing schema is converted to a free-form object.
    return APIParameter(
        name=_BODY,
        location=_BODY,
        required=bool(body.get("required", False)),
        description=body.get("description"),
        schema=converter.convert(media.get("schema")),
    )


def _extract_responses(
    responses: dict[str, Any],
    spec: dict[str, Any],
    converter: _SchemaConverter,
) -> dict[str, ResponseInfo]:
    """Extract every declared response, keyed by status code string.

    Each media type maps to its converted schema, or ``None`` when the media
    type declares no schema.
    """
    result: dict[str, ResponseInfo] = {}
    for status_code, response in responses.items():
        response = deref(response, spec)
        if not isinstance(response, dict):
            continue

        content: dict[str, Optional[SchemaNode]] = {}
        for media_type, media in (response.get("content") or {}).items():
            schema = media.get("schema") if isinstance(media, dict) else None
            content[media_type] = converter.convert(schema) if schema is not None else None

        result[str(status_code)] = ResponseInfo(
            status_code=str(status_code),
            description=response.get("description"),
            content=content,
        )
    return result


def _extract_metadata(extension: Any) -> Optional[OperationMetadata]:
    """Read category and lifecycle metadata from the vendor extension."""
    if not isinstance(extension, dict):
        return None

    previews: list[str] = []
    for preview in extension.get("previews") or []:
        if isinstance(preview, dict):
            if preview.get("name"):
                previews.append(str(preview["name"]))
        elif preview:
            previews.append(str(preview))

    return OperationMetadata(
        category=extension.get("category"),
        subcategory=extension.get("subcategory"),
        deprecation_date=_as_text(extension.get("deprecationDate")),
        removal_date=_as_text(extension.get("removalDate")),
        previews=previews,
        enabled_for_apps=bool(extension.get("enabledForGitHubApps", False)),
        cloud_only=bool(extension.get("githubCloudOnly", False)),
    )


def _as_text(value: Any) -> Optional[str]:
    # YAML loads unquoted dates as ``datetime.date``.
    return None if value is None else str(value)
