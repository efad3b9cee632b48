# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

from typing import Annotated

import typer

from ..config import BridgeConfig, ConfigError
from ..logging import configure_debug, fail
from .commands import register_commands
from .shared import CLILogger, CLIState

CONFIG_ERROR_EXIT_CODE = 2

app = typer.Typer(
    name="rapidkit-bridge",
    help="Find, provision and drive the RapidKit core engine.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Annotated[bool, typer.Option("--debug", help="Write probe and resolution diagnostics to stderr.")] = False,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji in messages.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable coloured output.")] = False,
) -> None:
    """Build the configuration once and share it with every command."""

    try:
        config = BridgeConfig.from_env()
    except ConfigError as exc:
        fail(str(exc), use_emoji=not no_emoji)
        raise typer.Exit(code=CONFIG_ERROR_EXIT_CODE) from exc
    configure_debug(debug or config.debug)
    ctx.obj = CLIState(
        config=config,
        logger=CLILogger(use_emoji=not no_emoji, use_color=False if no_color else None),
    )


register_commands(app)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
