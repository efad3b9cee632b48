# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``resolve``: show the execution target the bridge would use."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from ...environment.models import IsolatedEnvTarget, SystemTarget
from ...errors import BridgeError, format_bridge_error
from ..options import JsonOption
from ..shared import get_state


def target_rows(target: SystemTarget | IsolatedEnvTarget) -> list[tuple[str, str]]:
    """Return ``(label, value)`` pairs describing ``target``."""

    rows = [("kind", target.kind), ("interpreter", str(target.interpreter_path))]
    if isinstance(target, IsolatedEnvTarget):
        rows.append(("environment", str(target.env_root)))
    else:
        rows.append(("source", target.source))
    rows.append(("engine script", str(target.engine_path) if target.engine_path else "-"))
    return rows


def resolve_command(ctx: typer.Context, as_json: JsonOption = False) -> None:
    """Resolve (and provision if necessary) the engine runtime."""

    state = get_state(ctx)
    try:
        target = state.bridge.resolver.resolve_for(Path.cwd())
    except BridgeError as exc:
        state.logger.fail(format_bridge_error(exc))
        raise typer.Exit(code=1) from exc

    if as_json:
        state.logger.echo_json(target.model_dump(mode="json"))
        return
    table = Table(title="Engine runtime", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    for label, value in target_rows(target):
        table.add_row(label, value)
    state.logger.console.print(table)


def register(app: typer.Typer) -> None:
    app.command("resolve")(resolve_command)


__all__ = ["register", "resolve_command", "target_rows"]
