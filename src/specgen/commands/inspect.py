"""Inspect commands -- examine a document and its resolved class graph.

Provides the ``specgen inspect`` sub-command group with read-only views:

* ``classes`` -- every surviving class with its kind and fields.
* ``endpoints`` -- every endpoint method with its request and response.
* ``info`` -- document metadata and how many operations are supported.
"""

from __future__ import annotations

import typer

from specgen.commands import effective_config, exit_on_error
from specgen.output import print_document, print_table

inspect_app = typer.Typer(no_args_is_help=True)

_SPEC_ARGUMENT = typer.Argument(help="OpenAPI document: file path, URL, or '-' for stdin.")


@inspect_app.command("classes")
def inspect_classes(ctx: typer.Context, spec: str = _SPEC_ARGUMENT) -> None:
    """List the resolved classes, in creation order.

    Example::

        specgen inspect classes api.github.com.json
        specgen --plain inspect classes openapi.yaml | cut -f1
    """
    from specgen.pipeline import generate_from_source
    from specgen.typegraph.serialize import dump_field

    with exit_on_error():
        config = effective_config(ctx)
        result = generate_from_source(spec, config.generator)

    rows: list[list[str]] = []
    for cls in result.classes:
        fields = []
        for f in cls.fields:
            text = f"{f.name}: {dump_field(f)['type']}"
            if f.is_collection:
                text += "[]"
            if f.nullable:
                text += "?"
            fields.append(text)
        rows.append([
            cls.qualified_name,
            cls.kind.value + (" (request)" if cls.is_request else ""),
            ", ".join(fields) or "-",
        ])

    print_table(["Class", "Kind", "Fields"], rows, title=f"Classes ({len(rows)})")


@inspect_app.command("endpoints")
def inspect_endpoints(ctx: typer.Context, spec: str = _SPEC_ARGUMENT) -> None:
    """List endpoint methods grouped by endpoint.

    Example::

        specgen inspect endpoints api.github.com.json
    """
    from specgen.pipeline import generate_from_source
    from specgen.typegraph.serialize import type_name

    with exit_on_error():
        config = effective_config(ctx)
        result = generate_from_source(spec, config.generator)

    rows: list[list[str]] = []
    for endpoint in result.endpoints:
        for method in endpoint.methods:
            rows.append([
                endpoint.class_name,
                method.name,
                method.http_method,
                method.path,
                method.request_class.qualified_name,
                type_name(method.response_type) or "void",
            ])

    print_table(
        ["Endpoint", "Method", "HTTP", "Path", "Request", "Response"],
        rows,
        title=f"Endpoint methods ({len(rows)})",
    )


@inspect_app.command("info")
def inspect_info(ctx: typer.Context, spec: str = _SPEC_ARGUMENT) -> None:
    """Show document metadata and operation support counts.

    Example::

        specgen inspect info api.github.com.json
    """
    from specgen.assembler import EndpointAssembler
    from specgen.pipeline import parse_source

    with exit_on_error():
        config = effective_config(ctx)
        parsed = parse_source(spec, config.generator)

    assembler = EndpointAssembler(config.generator)
    supported = sum(1 for op in parsed.operations if assembler.is_supported(op))
    print_document(
        {
            "title": parsed.info.title,
            "version": parsed.info.version,
            "openapi_version": parsed.openapi_version,
            "description": parsed.info.description or "-",
            "operations": len(parsed.operations),
            "supported_operations": supported,
            "schema_pointers": len(parsed.schemas),
        }
    )
