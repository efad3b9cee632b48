# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Single-shot engine calls answered with schema-versioned JSON."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel

from .config import BridgeConfig
from .errors import BridgeError, BridgeErrorCode
from .executor import CommandExecutor
from .protocol import CURRENT_SCHEMA_VERSION, CoreVersionPayload, ProjectDetectPayload, decode_model

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class EngineJsonResult(Generic[ModelT]):
    """Outcome of an engine call together with its raw streams."""

    ok: bool
    exit_code: int
    stdout: str
    stderr: str
    data: ModelT | None = None
    error: BridgeError | None = None


class EngineClient:
    """Typed wrappers around engine subcommands that speak JSON."""

    def __init__(self, config: BridgeConfig, executor: CommandExecutor) -> None:
        self._config = config
        self._executor = executor

    def get_core_version(self, *, cwd: Path | None = None) -> EngineJsonResult[CoreVersionPayload]:
        """Return the engine version reported by ``--version --json``."""

        return self.call_json(["--version", "--json"], CoreVersionPayload, cwd=cwd)

    def detect_project(self, path: Path | str, *, cwd: Path | None = None) -> EngineJsonResult[ProjectDetectPayload]:
        """Ask the engine whether ``path`` belongs to a RapidKit project.

        Args:
            path: Directory or file to classify.
            cwd: Working directory for the engine process.

        Returns:
            EngineJsonResult[ProjectDetectPayload]: Detection payload on success.
        """

        return self.call_json(["project", "detect", "--path", str(path), "--json"], ProjectDetectPayload, cwd=cwd)

    def call_json(
        self,
        args: Sequence[str],
        model: type[ModelT],
        *,
        cwd: Path | None = None,
        expected_schema_version: int = CURRENT_SCHEMA_VERSION,
        timeout: float | None = None,
    ) -> EngineJsonResult[ModelT]:
        """Run ``args`` and decode stdout into ``model``.

        Args:
            args: Engine arguments.
            model: Payload model validating the call-site requirements.
            cwd: Working directory for the engine process.
            expected_schema_version: Accepted ``schema_version`` value.
            timeout: Timeout in seconds; defaults to the configured engine-call timeout.

        Returns:
            EngineJsonResult[ModelT]: ``ok`` only when the engine exited zero
            and the payload decoded and validated.
        """

        captured = self._executor.capture(
            list(args),
            cwd=cwd,
            timeout=timeout if timeout is not None else self._config.timeouts.engine_call,
        )
        if captured.exit_code != 0:
            detail = captured.stderr.strip() or f"exit status {captured.exit_code}"
            return EngineJsonResult(
                ok=False,
                exit_code=captured.exit_code,
                stdout=captured.stdout,
                stderr=captured.stderr,
                error=BridgeError(BridgeErrorCode.ENGINE_FAILED, detail),
            )
        decoded = decode_model(captured.stdout, expected_schema_version, model)
        return EngineJsonResult(
            ok=decoded.ok,
            exit_code=captured.exit_code,
            stdout=captured.stdout,
            stderr=captured.stderr,
            data=decoded.data,
            error=decoded.error,
        )


__all__ = ["EngineClient", "EngineJsonResult"]
