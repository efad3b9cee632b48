# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``doctor``: report bridge configuration and engine health."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from rich.table import Table

from ...bridge import Bridge
from ...environment.versioning import check_engine_version
from ...errors import BridgeError
from ..shared import get_state


@dataclass(frozen=True, slots=True)
class DoctorCheck:
    name: str
    ok: bool
    detail: str


def run_doctor(bridge: Bridge) -> list[DoctorCheck]:
    """Return the diagnostic checks for ``bridge``.

    Args:
        bridge: Wired bridge services to inspect.

    Returns:
        list[DoctorCheck]: Ordered checks; resolution failures are reported
        as a failed check instead of raising.
    """

    config = bridge.config
    checks = [
        DoctorCheck("cache root", True, str(config.cache_root)),
        DoctorCheck("install target", True, config.install_target),
        DoctorCheck("force isolated env", True, "yes" if config.force_venv else "no"),
    ]
    try:
        target = bridge.resolver.resolve_for(Path.cwd())
    except BridgeError as exc:
        checks.append(DoctorCheck("runtime", False, f"{exc.code.value}: {exc.detail}"))
        return checks
    checks.append(DoctorCheck("runtime", True, f"{target.kind} {target.interpreter_path}"))

    result = bridge.engine.get_core_version()
    if not result.ok or result.data is None:
        detail = result.error.code.value if result.error is not None else "unknown failure"
        checks.append(DoctorCheck("engine version", False, detail))
        return checks
    version = check_engine_version(result.data, config.engine.min_version)
    checks.append(DoctorCheck("engine version", version.compatible, version.describe()))
    return checks


def doctor_command(ctx: typer.Context) -> None:
    """Diagnose engine discovery, provisioning and protocol compatibility."""

    state = get_state(ctx)
    checks = run_doctor(state.bridge)
    table = Table(title="RapidKit bridge doctor")
    table.add_column("check", style="bold")
    table.add_column("status")
    table.add_column("detail", overflow="fold")
    for check in checks:
        status = "[green]ok[/green]" if check.ok else "[red]fail[/red]"
        table.add_row(check.name, status, check.detail)
    state.logger.console.print(table)
    if not all(check.ok for check in checks):
        raise typer.Exit(code=1)


def register(app: typer.Typer) -> None:
    app.command("doctor")(doctor_command)


__all__ = ["DoctorCheck", "register", "run_doctor"]
