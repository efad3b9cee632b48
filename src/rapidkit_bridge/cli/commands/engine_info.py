# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``version`` and ``detect``: single-shot engine queries."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...errors import BridgeError, format_bridge_error
from ..options import JsonOption
from ..shared import CLIState, get_state


def _report_failure(state: CLIState, error: BridgeError | None) -> None:
    if error is not None:
        state.logger.fail(format_bridge_error(error))
    else:
        state.logger.fail("RapidKit bridge: the engine call failed.")


def version_command(ctx: typer.Context, as_json: JsonOption = False) -> None:
    """Print the version reported by the RapidKit core engine."""

    state = get_state(ctx)
    result = state.bridge.engine.get_core_version(cwd=Path.cwd())
    if not result.ok or result.data is None:
        _report_failure(state, result.error)
        raise typer.Exit(code=1)
    if as_json:
        state.logger.echo_json({"version": result.data.version})
        return
    state.logger.ok(f"{state.config.engine.distribution} {result.data.version}")


def detect_command(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Directory to classify.")] = Path("."),
    as_json: JsonOption = False,
) -> None:
    """Ask the engine whether PATH belongs to a RapidKit project."""

    state = get_state(ctx)
    result = state.bridge.engine.detect_project(path.resolve(), cwd=Path.cwd())
    if not result.ok or result.data is None:
        _report_failure(state, result.error)
        raise typer.Exit(code=1)
    payload = result.data
    if as_json:
        state.logger.echo_json(payload.model_dump(mode="json", by_alias=True))
        return
    if payload.is_rapidkit_project:
        state.logger.ok(f"RapidKit project at {payload.project_root or path} ({payload.confidence} confidence)")
    else:
        state.logger.info(f"{path} is not a RapidKit project")


def register(app: typer.Typer) -> None:
    app.command("version")(version_command)
    app.command("detect")(detect_command)


__all__ = ["detect_command", "register", "version_command"]
