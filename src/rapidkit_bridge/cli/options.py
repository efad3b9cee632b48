# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reusable Typer option annotations."""

from __future__ import annotations

from typing import Annotated

import typer

JsonOption = Annotated[bool, typer.Option("--json", help="Emit machine-readable JSON on stdout.")]
RefreshOption = Annotated[bool, typer.Option("--refresh", help="Ignore cached data and query the engine.")]
CategoryOption = Annotated[str | None, typer.Option("--category", help="Only modules in this category.")]
TagOption = Annotated[str | None, typer.Option("--tag", help="Only modules carrying this tag.")]
DetailedOption = Annotated[bool, typer.Option("--detailed", help="Ask the engine for detailed module data.")]
SearchOption = Annotated[
    str | None,
    typer.Option("--search", help="Filter the displayed modules by a case-insensitive substring."),
]

__all__ = [
    "CategoryOption",
    "DetailedOption",
    "JsonOption",
    "RefreshOption",
    "SearchOption",
    "TagOption",
]
