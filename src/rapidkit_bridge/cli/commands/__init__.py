# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command registry."""

from __future__ import annotations

import typer

from . import discovery, doctor, engine_info, resolve, run

__all__ = ["register_commands"]


def register_commands(app: typer.Typer) -> None:
    """Register built-in CLI commands on ``app``.

    Args:
        app: Typer application receiving command registrations.
    """

    resolve.register(app)
    engine_info.register(app)
    discovery.register(app)
    doctor.register(app)
    run.register(app)
