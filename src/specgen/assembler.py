"""Endpoint assembler -- drive a full generation run over a parsed spec.

:class:`EndpointAssembler` is the entry point of the type-graph core. For
every *supported* operation it builds a fresh request class from the
parameters and a (possibly shared) response type from the chosen success
schema, groups the resulting methods into endpoints by category, and
finally runs the reference resolver over everything.

An operation is supported when it:

* has a summary (the method and request class names are derived from it);
* declares at least one response, at least one of them ``2xx``;
* either declares ``204`` or offers ``application/json`` in a ``2xx``
  response.

Anything else (redirect-only operations, binary downloads such as
``application/zip``) is skipped without error. Skips are logged at debug
level.

Example::

    from specgen.assembler import EndpointAssembler

    result = EndpointAssembler().build(parsed_spec)
    for endpoint in result.endpoints:
        print(endpoint.class_name, [m.name for m in endpoint.methods])
"""

from __future__ import annotations

import logging
from typing import Optional

from specgen.exceptions import InvariantError, UnrecognizedLocationError
from specgen.models import (
    APIOperation,
    APIParameter,
    GeneratorConfig,
    ParsedSpec,
    SchemaKind,
    SchemaNode,
)
from specgen.naming import DefaultNamer, Namer
from specgen.typegraph.builder import ModelBuilder
from specgen.typegraph.model import (
    ClassModel,
    EndpointMethodModel,
    EndpointModel,
    FieldLocation,
    GenerationResult,
    TypeRef,
)
from specgen.typegraph.registry import TypeRegistry
from specgen.typegraph.resolver import resolve_references

logger = logging.getLogger(__name__)

_NO_CONTENT = "204"
_DEFAULT_CATEGORY = "default"

# Parameter ``in`` values accepted for request fields.
_LOCATIONS: dict[str, FieldLocation] = {
    "path": FieldLocation.PATH,
    "query": FieldLocation.QUERY,
    "header": FieldLocation.HEADER,
    "body": FieldLocation.BODY,
    "cookie": FieldLocation.COOKIE,
}


class EndpointAssembler:
    """Builds endpoints and the deduplicated class set from a :class:`~specgen.models.ParsedSpec`.

    Args:
        config: Generator settings (package names, JSON media type, dedup).
        namer: Identifier capability. Defaults to
            :class:`~specgen.naming.DefaultNamer`.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        namer: Optional[Namer] = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.namer: Namer = namer or DefaultNamer()
        self.builder = ModelBuilder(self.namer)

    def build(self, spec: ParsedSpec) -> GenerationResult:
        """Run a complete generation pass over *spec*.

        A fresh :class:`~specgen.typegraph.registry.TypeRegistry` is used for
        every call, so repeated runs never share state.

        Returns:
            The grouped endpoints and the final, placeholder-free class list.

        Raises:
            SchemaError: A ``$ref`` pointer is missing from the document.
            CompositionError: Composed schemas disagree on a field.
            UnrecognizedLocationError: A parameter has an unknown location.
            InvariantError: A supported operation has no usable response.
            ResolutionError: A placeholder was never resolved.
        """
        registry = TypeRegistry(spec.schemas, self.builder, self.config.model_package)

        categories: dict[str, list[EndpointMethodModel]] = {}
        skipped = 0
        for operation in spec.operations:
            if not self.is_supported(operation):
                skipped += 1
                logger.debug(
                    "Skipping unsupported operation %s %s",
                    operation.method.value.upper(),
                    operation.path,
                )
                continue
            method = self._create_method(operation, registry)
            categories.setdefault(method.category or _DEFAULT_CATEGORY, []).append(method)

        self.builder.finish(registry)

        endpoints: list[EndpointModel] = []
        for category, methods in categories.items():
            endpoints.append(
                EndpointModel(
                    class_name=self._endpoint_name(category),
                    category=category,
                    methods=sorted(methods, key=lambda m: m.name),
                )
            )

        classes = resolve_references(
            registry.all_classes(), registry, endpoints, dedupe=self.config.dedupe
        )
        logger.debug(
            "Built %d endpoint(s), %d class(es); skipped %d operation(s)",
            len(endpoints),
            len(classes),
            skipped,
        )
        return GenerationResult(endpoints=endpoints, classes=classes)

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def is_supported(self, operation: APIOperation) -> bool:
        """Return True if *operation* can be turned into an endpoint method."""
        # The summary names the method and its request class.
        if not operation.summary:
            return False
        if not operation.responses:
            return False
        success = [s for s in operation.responses if s.startswith("2")]
        if not success:
            return False
        if _NO_CONTENT in operation.responses:
            return True
        return any(self._json_schema(operation, status) is not None for status in success)

    def _json_schema(self, operation: APIOperation, status: str) -> Optional[SchemaNode]:
        response = operation.responses[status]
        if self.config.json_media_type not in response.content:
            return None
        schema = response.content[self.config.json_media_type]
        # JSON declared without a schema still returns a document.
        return schema or SchemaNode(kind=SchemaKind.OBJECT)

    # ------------------------------------------------------------------
    # Method construction
    # ------------------------------------------------------------------

    def _create_method(
        self, operation: APIOperation, registry: TypeRegistry
    ) -> EndpointMethodModel:
        assert operation.summary is not None
        request_class = self._build_request_class(operation, registry)
        response_type = self._build_response_type(operation, registry)

        meta = operation.metadata
        category = meta.category if meta and meta.category else None
        if category is None and operation.tags:
            category = operation.tags[0]

        return EndpointMethodModel(
            http_method=operation.method.value.upper(),
            path=operation.path,
            name=self.namer.variable_name(operation.summary),
            request_class=request_class,
            response_type=response_type,
            category=category or _DEFAULT_CATEGORY,
            subcategory=meta.subcategory if meta else None,
            summary=operation.summary,
            operation_id=operation.operation_id,
            docs_url=operation.docs_url,
            deprecation_date=meta.deprecation_date if meta else None,
            removal_date=meta.removal_date if meta else None,
            previews=list(meta.previews) if meta else [],
            enabled_for_apps=meta.enabled_for_apps if meta else False,
            cloud_only=meta.cloud_only if meta else False,
            deprecated=operation.deprecated,
        )

    def _build_response_type(
        self, operation: APIOperation, registry: TypeRegistry
    ) -> Optional[TypeRef]:
        """Build the type of the lowest ``2xx`` response that carries JSON.

        Returns ``None`` for an operation whose only success is ``204``.
        """
        context = self.namer.type_name(f"{operation.summary} response")
        for status in sorted(s for s in operation.responses if s.startswith("2")):
            schema = self._json_schema(operation, status)
            if schema is not None:
                return self.builder.build(schema, registry, context=context)

        if _NO_CONTENT in operation.responses:
            return None
        raise InvariantError(
            f"Operation {operation.method.value.upper()} {operation.path} has no "
            f"2xx '{self.config.json_media_type}' response"
        )

    def _build_request_class(
        self, operation: APIOperation, registry: TypeRegistry
    ) -> ClassModel:
        """Build a fresh, never shared request class from the parameters."""
        assert operation.summary is not None
        simple = self.namer.type_name(operation.summary)
        request = registry.add_class(
            ClassModel(
                qualified_name=registry.unique_name(simple),
                is_request=True,
                description=operation.description,
            )
        )
        for parameter in operation.parameters:
            schema = _parameter_schema(parameter, operation)
            name = parameter.name or schema.name
            if not name:
                raise InvariantError(
                    f"Unnamed parameter in {operation.method.value.upper()} {operation.path}"
                )
            field = self.builder.build_field(simple, name, schema, registry)
            if parameter.location is not None:
                field.location = _map_location(parameter, operation)
            if parameter.description and not field.description:
                field.description = parameter.description
            request.fields.append(field)
        return request

    def _endpoint_name(self, category: str) -> str:
        simple = self.namer.type_name(f"{category}-client")
        package = self.config.endpoint_package
        return f"{package}.{simple}" if package else simple


def _parameter_schema(parameter: APIParameter, operation: APIOperation) -> SchemaNode:
    if parameter.schema_ is not None:
        return parameter.schema_
    raise InvariantError(
        f"No schema found for parameter '{parameter.name}' of "
        f"{operation.method.value.upper()} {operation.path}"
    )


def _map_location(parameter: APIParameter, operation: APIOperation) -> FieldLocation:
    assert parameter.location is not None
    location = _LOCATIONS.get(parameter.location.lower())
    if location is None:
        raise UnrecognizedLocationError(
            f"Parameter '{parameter.name}' of {operation.method.value.upper()} "
            f"{operation.path} has unrecognized location '{parameter.location}'"
        )
    return location
