# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Top-level engine commands assumed when discovery has never succeeded."""

from __future__ import annotations

from typing import Final

# Over-forwarding an unknown command is preferred to refusing to forward.
BOOTSTRAP_CORE_COMMANDS: Final[frozenset[str]] = frozenset(
    {
        "version",
        "project",
        "create",
        "init",
        "dev",
        "start",
        "build",
        "test",
        "lint",
        "format",
        "add",
        "list",
        "info",
        "upgrade",
        "diff",
        "doctor",
        "license",
        "commands",
        "reconcile",
        "rollback",
        "uninstall",
        "checkpoint",
        "optimize",
        "snapshot",
        "frameworks",
        "modules",
        "merge",
    }
)

__all__ = ["BOOTSTRAP_CORE_COMMANDS"]
