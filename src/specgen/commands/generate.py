"""Generate command -- run the full pipeline and emit the class graph as JSON.

``specgen generate SPEC`` loads the document, builds every supported
operation, resolves and deduplicates the class graph, and prints the result
(see :func:`~specgen.typegraph.serialize.dump_result`). With ``-o FILE`` the
document is written atomically to *FILE* instead; nothing is written when
the run fails.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from specgen.commands import effective_config, exit_on_error
from specgen.output import get_output, info, print_document, success


def generate_command(
    ctx: typer.Context,
    spec: str = typer.Argument(help="OpenAPI document: file path, URL, or '-' for stdin."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the JSON graph to this file."
    ),
    no_dedupe: bool = typer.Option(
        False, "--no-dedupe", help="Keep structurally identical classes separate."
    ),
) -> None:
    """Build the class graph and endpoints for SPEC.

    Example::

        specgen generate api.github.com.json -o graph.json
        specgen --model-package com.acme.model generate openapi.yaml
    """
    from specgen.config import atomic_write
    from specgen.pipeline import generate_from_source
    from specgen.typegraph.serialize import dump_result

    with exit_on_error():
        config = effective_config(ctx)
        generator = config.generator
        if no_dedupe:
            generator = generator.model_copy(update={"dedupe": False})
        result = generate_from_source(spec, generator)

        document = dump_result(result)
        info(
            f"{len(result.endpoints)} endpoint(s), "
            f"{sum(len(e.methods) for e in result.endpoints)} method(s), "
            f"{len(result.classes)} class(es)"
        )
        if output is None:
            print_document(document)
            return

        try:
            atomic_write(output, get_output().dumps(document) + "\n")
        except OSError as exc:
            from specgen.exceptions import SpecgenError

            raise SpecgenError(f"Cannot write {output}: {exc}") from exc
        success(f"Wrote {output}")
