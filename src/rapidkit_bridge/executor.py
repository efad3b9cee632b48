# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run engine commands through the resolved execution target."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from .config import BridgeConfig
from .environment.models import IsolatedEnvTarget, SystemTarget
from .environment.resolver import RuntimeResolver
from .errors import BridgeError, format_bridge_error
from .logging import fail
from .process_utils import CommandOptions, CommandRunner, run_command

LOGGER = logging.getLogger(__name__)

FAILED_EXIT_CODE = 1


@dataclass(frozen=True, slots=True)
class CaptureResult:
    """Uniform outcome of a captured engine invocation.

    Attributes:
        exit_code: Engine exit status, or ``1`` when the engine never started.
        stdout: Captured standard output.
        stderr: Captured standard error, or the reason the engine never started.
    """

    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandExecutor:
    """Invoke the engine with captured or streamed output.

    Neither entry point raises for resolution, provisioning or spawn failures;
    they are folded into exit code ``1``.
    """

    def __init__(
        self,
        config: BridgeConfig,
        resolver: RuntimeResolver,
        *,
        runner: CommandRunner = run_command,
    ) -> None:
        self._config = config
        self._resolver = resolver
        self._runner = runner

    def command_for(self, target: SystemTarget | IsolatedEnvTarget, args: Sequence[str]) -> list[str]:
        """Return the full argument vector that runs ``args`` on ``target``."""

        if target.engine_path is not None:
            return [str(target.engine_path), *args]
        return [str(target.interpreter_path), "-m", self._config.engine.module, *args]

    def capture(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CaptureResult:
        """Run the engine with ``args`` and capture its output.

        Args:
            args: Engine arguments, without the interpreter or module prefix.
            cwd: Working directory for the engine process.
            timeout: Timeout in seconds; an expired call reports exit code ``124``.
            env: Extra environment variables for the engine process.

        Returns:
            CaptureResult: Exit status and captured streams.
        """

        try:
            target = self._resolver.resolve_for(cwd)
        except BridgeError as exc:
            return CaptureResult(exit_code=FAILED_EXIT_CODE, stdout="", stderr=format_bridge_error(exc))

        command = self.command_for(target, args)
        LOGGER.debug("capture %s", " ".join(command))
        options = CommandOptions(
            cwd=cwd,
            env=self._merged_env(env),
            check=False,
            capture_output=True,
            timeout=timeout,
            discard_stdin=True,
        )
        try:
            completed = self._runner(command, options=options)
        except (OSError, ValueError) as exc:
            message = str(exc) or f"failed to start {command[0]}"
            return CaptureResult(exit_code=FAILED_EXIT_CODE, stdout="", stderr=message)
        return CaptureResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Run the engine with inherited standard streams.

        Args:
            args: Engine arguments, without the interpreter or module prefix.
            cwd: Working directory for the engine process.
            timeout: Optional timeout in seconds.
            env: Extra environment variables for the engine process.

        Returns:
            int: Engine exit status, or ``1`` when the engine could not start.
        """

        try:
            target = self._resolver.resolve_for(cwd)
        except BridgeError as exc:
            fail(format_bridge_error(exc), use_emoji=False)
            return FAILED_EXIT_CODE

        command = self.command_for(target, args)
        LOGGER.debug("run %s", " ".join(command))
        options = CommandOptions(
            cwd=cwd,
            env=self._merged_env(env),
            check=False,
            capture_output=False,
            timeout=timeout,
        )
        try:
            completed = self._runner(command, options=options)
        except (OSError, ValueError) as exc:
            fail(f"RapidKit bridge: failed to start the engine: {exc}", use_emoji=False)
            return FAILED_EXIT_CODE
        return completed.returncode

    def _merged_env(self, extra: Mapping[str, str] | None) -> dict[str, str] | None:
        if not extra and not self._config.env:
            return None
        merged = dict(self._config.env or os.environ)
        merged.update(extra or {})
        return merged


__all__ = ["CaptureResult", "CommandExecutor", "FAILED_EXIT_CODE"]
