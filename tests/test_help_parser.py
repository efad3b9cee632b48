# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for extracting command names from engine help output."""

from __future__ import annotations

from rapidkit_bridge.cache.help_parser import parse_commands_from_help

CLICK_HELP = """\
Usage: rapidkit [OPTIONS] COMMAND [ARGS]...

  RapidKit core engine.

Options:
  --version  Show the version and exit.
  --help     Show this message and exit.

Commands:
  create     Create a new project from a kit.
  add        Add a module to the current project.
             Supports several modules at once.
  doctor     Diagnose the local environment.
  snapshot   Manage project snapshots.
"""

RICH_HELP = """\
 Usage: rapidkit [OPTIONS] COMMAND [ARGS]...

╭─ Options ────────────────────────────────────────────╮
│ --help          Show this message and exit.          │
╰──────────────────────────────────────────────────────╯
╭─ Commands ───────────────────────────────────────────╮
│ create     Create a new project                      │
│ modules    Manage modules                            │
│              continued description line              │
│ frameworks List frameworks                           │
╰──────────────────────────────────────────────────────╯
"""


def test_click_commands_section() -> None:
    assert parse_commands_from_help(CLICK_HELP) == {"create", "add", "doctor", "snapshot"}


def test_rich_commands_panel() -> None:
    assert parse_commands_from_help(RICH_HELP) == {"create", "modules", "frameworks"}


def test_explicit_program_mentions_are_recognised() -> None:
    text = "Examples:\n  rapidkit merge --help\n  rapidkit rollback\n  other tool\n"

    assert parse_commands_from_help(text) == {"merge", "rollback"}


def test_program_name_is_configurable() -> None:
    text = "Try:\n  rk checkpoint create\n  rapidkit merge\n"

    assert parse_commands_from_help(text, program="rk") == {"checkpoint"}


def test_options_are_not_commands() -> None:
    text = "Options:\n  --json  Emit JSON.\n  -v      Verbose.\n"

    assert parse_commands_from_help(text) == set()


def test_empty_text_yields_nothing() -> None:
    assert parse_commands_from_help("") == set()
