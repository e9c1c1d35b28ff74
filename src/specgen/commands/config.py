"""Config commands -- view and modify global configuration.

Provides the ``specgen config`` sub-command group for reading and updating
the user's global configuration file (:class:`~specgen.models.GlobalConfig`).
``show`` prints the *effective* configuration, after project config,
environment variables, and CLI flags have been layered on top.
"""

from __future__ import annotations

import typer

from specgen.commands import effective_config, exit_on_error
from specgen.output import info, print_document, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Example::

        specgen config show
        SPECGEN_MODEL_PACKAGE=com.acme.model specgen --json config show
    """
    from specgen.config import global_config_path

    with exit_on_error():
        config = effective_config(ctx)
    info(f"Config file: {global_config_path()}")
    print_document(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'generator.model_package')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value in the global config file.

    The value is validated against :class:`~specgen.models.GlobalConfig`
    before saving, so ``generator.dedupe false`` stores a boolean and an
    unknown key or invalid value exits with an error.

    Example::

        specgen config set generator.model_package com.acme.model
        specgen config set output.format json
    """
    from specgen.config import set_config_value

    with exit_on_error():
        set_config_value(key, value)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset() -> None:
    """Reset the global configuration to defaults."""
    from specgen.config import save_global_config
    from specgen.models import GlobalConfig

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
