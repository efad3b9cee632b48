# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared CLI helpers: error type, logger adapter and per-invocation state."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import typer
from rich.console import Console

from ..bridge import Bridge
from ..config import BridgeConfig
from ..console import get_console_manager
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import warn as core_warn


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings."""

    use_emoji: bool
    use_color: bool | None = None

    @property
    def console(self) -> Console:
        color = True if self.use_color is None else self.use_color
        return get_console_manager().get(color=color, emoji=self.use_emoji)

    def fail(self, message: str) -> None:
        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def info(self, message: str) -> None:
        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def echo_json(self, payload: Any) -> None:
        """Write ``payload`` to stdout as indented JSON."""

        typer.echo(json.dumps(payload, indent=2, default=str))


def build_bridge(config: BridgeConfig) -> Bridge:
    """Return the bridge used by CLI commands."""

    return Bridge.create(config)


@dataclass(slots=True)
class CLIState:
    """Per-invocation state stored on ``typer.Context.obj``."""

    config: BridgeConfig
    logger: CLILogger
    _bridge: Bridge | None = field(default=None, repr=False)

    @property
    def bridge(self) -> Bridge:
        if self._bridge is None:
            self._bridge = build_bridge(self.config)
        return self._bridge


def get_state(ctx: typer.Context) -> CLIState:
    """Return the :class:`CLIState` installed by the application callback.

    Raises:
        CLIError: If the callback did not run.
    """

    state = ctx.find_object(CLIState)
    if state is None:
        raise CLIError("CLI state is not initialised")
    return state


__all__ = ["CLIError", "CLILogger", "CLIState", "build_bridge", "get_state"]
