"""specgen -- Build deduplicated class-model graphs from OpenAPI 3.0/3.1 specs.

This package converts an OpenAPI specification into a graph of typed class
models and endpoint method descriptors that a code emitter for any target
language can render. Shared component schemas become one class each,
``$ref`` cycles are resolved, and structurally identical classes are merged
so that large specifications do not explode into near-duplicate types.

Typical workflow::

    specgen generate openapi.json -o model.json   # resolved graph as JSON
    specgen inspect classes openapi.json          # browse the class set

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models for configuration and the parsed document.
    assembler: Per-operation orchestration producing endpoints and classes.
    typegraph: Type registry, model builder, and reference resolver.
    naming: Identifier derivation from free-text summaries.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
