"""Built-in CLI sub-commands for specgen.

* :mod:`~specgen.commands.generate` -- run the pipeline and emit the graph.
* :mod:`~specgen.commands.inspect` -- tables of resolved classes and
  endpoints.
* :mod:`~specgen.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect`` and ``config``) or a plain callback
function registered directly on the root app (``generate``).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import typer

from specgen.exceptions import SpecgenError
from specgen.models import GlobalConfig
from specgen.output import OutputFormat, OutputManager, error, get_output, set_output


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print a :class:`~specgen.exceptions.SpecgenError` and exit with its code."""
    try:
        yield
    except SpecgenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def effective_config(ctx: typer.Context) -> GlobalConfig:
    """Resolve the configuration with the root callback's CLI overrides applied.

    The configured output format and indentation are installed on the global
    :class:`~specgen.output.OutputManager` unless a format flag was given.

    Raises:
        ConfigError: If any configuration layer is invalid.
    """
    from specgen.config import resolve_config

    obj: dict[str, Optional[str]] = ctx.obj or {}
    config = resolve_config(
        cli_model_package=obj.get("model_package"),
        cli_endpoint_package=obj.get("endpoint_package"),
        cli_format=obj.get("format"),
    )

    current = get_output()
    if obj.get("format") is None and config.output.format != OutputFormat.AUTO.value:
        set_output(
            OutputManager(
                format=OutputFormat(config.output.format),
                no_color=current.no_color,
                quiet=current.is_quiet,
                verbose=current.is_verbose,
                indent=config.output.indent,
            )
        )
    else:
        current.indent = config.output.indent
    return config
