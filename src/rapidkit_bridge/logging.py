# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing messages and opt-in diagnostic logging."""

from __future__ import annotations

import logging
import sys
from typing import Final

from rich.text import Text

from .console import detect_tty, get_console_manager

ROOT_LOGGER_NAME: Final[str] = "rapidkit_bridge"
_CONFIGURED_FLAG: Final[str] = "_rapidkit_bridge_debug_configured"


def configure_debug(enabled: bool) -> None:
    """Route bridge diagnostics to stderr when ``enabled`` is true.

    Diagnostics never reach stdout, so JSON emitted by the engine and
    forwarded by the CLI stays parseable.

    Args:
        enabled: Whether probe and resolution diagnostics should be shown.
    """

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not enabled:
        logger.setLevel(logging.WARNING)
        return
    if not getattr(logger, _CONFIGURED_FLAG, False):
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(logging.Formatter("[rapidkit-bridge] %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
        setattr(logger, _CONFIGURED_FLAG, True)
    logger.setLevel(logging.DEBUG)


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise an empty string."""

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_emoji: bool,
    use_color: bool | None = None,
    stderr: bool = False,
) -> None:
    color_enabled = detect_tty(stderr=stderr) if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji, stderr=stderr)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    prefix = emoji("ℹ️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    prefix = emoji("✅ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message on stderr."""

    prefix = emoji("⚠️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color, stderr=True)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message on stderr."""

    prefix = emoji("❌ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="bold red", use_emoji=use_emoji, use_color=use_color, stderr=True)


__all__ = [
    "ROOT_LOGGER_NAME",
    "configure_debug",
    "emoji",
    "fail",
    "info",
    "ok",
    "warn",
]
