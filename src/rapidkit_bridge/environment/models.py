# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Execution target and probe result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ProbeStep(StrEnum):
    """Probe technique that proved the engine reachable."""

    SCRIPT_PATH = "script-path"
    IMPORT_SPEC = "import-spec"
    MODULE_RUN = "module-run"


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of probing one interpreter.

    Attributes:
        ok: Whether the engine is usable through the interpreter.
        detail: Diagnostic text for the last attempted step.
        step: Step that succeeded, when ``ok`` is true.
        engine_path: Engine console script discovered by the script-path step.
    """

    ok: bool
    detail: str | None = None
    step: ProbeStep | None = None
    engine_path: Path | None = None


class SystemTarget(BaseModel):
    """An interpreter that already reaches the engine."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["system"] = "system"
    interpreter_path: Path
    engine_path: Path | None = None
    source: str = "interpreters"


class IsolatedEnvTarget(BaseModel):
    """The tool-owned virtual environment provisioned under the cache root."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["isolated-env"] = "isolated-env"
    interpreter_path: Path
    env_root: Path
    engine_path: Path | None = None


ExecutionTarget = Annotated[SystemTarget | IsolatedEnvTarget, Field(discriminator="kind")]

EXECUTION_TARGET_ADAPTER: TypeAdapter[SystemTarget | IsolatedEnvTarget] = TypeAdapter(ExecutionTarget)


__all__ = [
    "EXECUTION_TARGET_ADAPTER",
    "ExecutionTarget",
    "IsolatedEnvTarget",
    "ProbeResult",
    "ProbeStep",
    "SystemTarget",
]
