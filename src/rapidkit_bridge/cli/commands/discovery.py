# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``commands`` and ``modules``: cached engine discovery."""

from __future__ import annotations

import typer
from rich.table import Table

from ...cache.modules import CatalogFilters
from ...catalog import ModuleCatalog
from ..options import CategoryOption, DetailedOption, JsonOption, RefreshOption, SearchOption, TagOption
from ..shared import get_state


def commands_command(
    ctx: typer.Context,
    refresh: RefreshOption = False,
    as_json: JsonOption = False,
) -> None:
    """List the top-level commands the engine supports."""

    state = get_state(ctx)
    names = sorted(state.bridge.commands.get_or_fetch(refresh=refresh))
    if as_json:
        state.logger.echo_json({"commands": names})
        return
    for name in names:
        typer.echo(name)


def modules_command(
    ctx: typer.Context,
    category: CategoryOption = None,
    tag: TagOption = None,
    detailed: DetailedOption = False,
    search: SearchOption = None,
    refresh: RefreshOption = False,
    as_json: JsonOption = False,
) -> None:
    """List the add-on modules published by the engine."""

    state = get_state(ctx)
    filters = CatalogFilters(category=category, tag=tag, detailed=detailed)
    entry = state.bridge.modules.get_modules_catalog(filters, refresh=refresh)
    if entry is None:
        state.logger.warn("Module catalog is unavailable; module features are disabled.")
        raise typer.Exit(code=1)

    if as_json:
        state.logger.echo_json(entry.model_dump(mode="json"))
        return

    catalog = ModuleCatalog(entry.modules)
    descriptors = catalog.search(search) if search else list(catalog.descriptors())
    table = Table(title=f"Modules ({entry.source})")
    table.add_column("id", style="bold")
    table.add_column("name")
    table.add_column("category")
    table.add_column("framework")
    table.add_column("description", overflow="fold")
    for descriptor in descriptors:
        table.add_row(
            descriptor.id,
            descriptor.name,
            descriptor.category,
            descriptor.framework,
            descriptor.description,
        )
    state.logger.console.print(table)


def register(app: typer.Typer) -> None:
    app.command("commands")(commands_command)
    app.command("modules")(modules_command)


__all__ = ["commands_command", "modules_command", "register"]
