# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``run``: forward a command line to the engine."""

from __future__ import annotations

from pathlib import Path

import typer

from ...forwarding import should_forward, split_forwarded_args
from ...logging import configure_debug
from ..shared import get_state

UNKNOWN_COMMAND_EXIT_CODE = 2


def forward_command(ctx: typer.Context) -> None:
    """Run the engine with the remaining arguments and exit with its status."""

    state = get_state(ctx)
    request = split_forwarded_args(ctx.args)
    if request.debug:
        configure_debug(True)

    known = state.bridge.commands.get_or_fetch()
    if not should_forward(request, known):
        state.logger.fail(f"Unknown engine command '{request.command}'. Run 'rapidkit-bridge commands' to list them.")
        raise typer.Exit(code=UNKNOWN_COMMAND_EXIT_CODE)

    code = state.bridge.executor.run(list(request.engine_args), cwd=Path.cwd())
    raise typer.Exit(code=code)


def register(app: typer.Typer) -> None:
    app.command(
        "run",
        context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    )(forward_command)


__all__ = ["forward_command", "register"]
