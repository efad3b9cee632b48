# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decide what part of a command line is handed to the engine."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from typing import Final

from .cache.bootstrap import BOOTSTRAP_CORE_COMMANDS

TOOL_OWNED_FLAGS: Final[frozenset[str]] = frozenset({"--debug", "--bridge-debug"})


@dataclass(frozen=True, slots=True)
class ForwardRequest:
    """Arguments destined for the engine plus the tool flags removed from them."""

    engine_args: tuple[str, ...]
    debug: bool = False

    @property
    def command(self) -> str | None:
        """Return the first positional argument, if any."""

        for arg in self.engine_args:
            if arg == "--":
                return None
            if not arg.startswith("-"):
                return arg
        return None


def split_forwarded_args(args: Sequence[str]) -> ForwardRequest:
    """Remove tool-owned flags from ``args``; everything after ``--`` is left untouched."""

    engine_args: list[str] = []
    debug = False
    passthrough = False
    for arg in args:
        if passthrough:
            engine_args.append(arg)
            continue
        if arg == "--":
            passthrough = True
            engine_args.append(arg)
            continue
        if arg in TOOL_OWNED_FLAGS:
            debug = True
            continue
        engine_args.append(arg)
    return ForwardRequest(engine_args=tuple(engine_args), debug=debug)


def should_forward(request: ForwardRequest, known_commands: Collection[str]) -> bool:
    """Return whether ``request`` targets a command the engine is known to support.

    Flag-only invocations such as ``--version`` are always forwarded, and so
    are the well-known core commands even when discovery missed them.
    """

    command = request.command
    return command is None or command in known_commands or command in BOOTSTRAP_CORE_COMMANDS


__all__ = ["TOOL_OWNED_FLAGS", "ForwardRequest", "should_forward", "split_forwarded_args"]
