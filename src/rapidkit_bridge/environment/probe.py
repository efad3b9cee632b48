# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cheap checks for whether an interpreter can already reach the engine."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from subprocess import CompletedProcess

from ..config import BridgeConfig
from ..process_utils import (
    TIMEOUT_EXIT_CODE,
    CommandOptions,
    CommandRunner,
    SubprocessExecutionError,
    run_command,
)
from .models import ProbeResult, ProbeStep

LOGGER = logging.getLogger(__name__)


class InterpreterProbe:
    """Decide whether the engine is usable through a given interpreter.

    Three techniques are tried in order and the first success wins: locating
    the engine console script through ``sysconfig`` and checking that it
    answers ``--version --json``, asking ``importlib`` for an import spec,
    and finally running ``-m <engine> --version --json``. A step that cannot
    spawn, times out or exits non-zero simply fails.
    """

    def __init__(self, config: BridgeConfig, *, runner: CommandRunner = run_command) -> None:
        self._config = config
        self._runner = runner
        engine = config.engine
        self._script_snippet = (
            "import os, sysconfig; "
            f"print(os.path.join(sysconfig.get_path('scripts'), {engine.script!r}))"
        )
        self._import_snippet = (
            f"import importlib.util; print(1 if importlib.util.find_spec({engine.module!r}) else 0)"
        )
        self._steps: tuple[tuple[ProbeStep, Callable[[str], ProbeResult]], ...] = (
            (ProbeStep.SCRIPT_PATH, self._check_script_path),
            (ProbeStep.IMPORT_SPEC, self._check_import_spec),
            (ProbeStep.MODULE_RUN, self._check_module_run),
        )

    def probe(self, interpreter: str | Path) -> ProbeResult:
        """Return whether ``interpreter`` can run the engine.

        Args:
            interpreter: Interpreter path or bare command name resolved on ``PATH``.

        Returns:
            ProbeResult: Successful result from the first passing step, or a
            failed result carrying the last diagnostic.
        """

        candidate = str(interpreter)
        last = ProbeResult(ok=False, detail=f"no probe step ran for {candidate}")
        for step, check in self._steps:
            result = check(candidate)
            LOGGER.debug("probe %s step=%s ok=%s detail=%s", candidate, step.value, result.ok, result.detail)
            if result.ok:
                return result
            last = result
        return last

    def _check_script_path(self, interpreter: str) -> ProbeResult:
        completed, error = self._call(
            [interpreter, "-c", self._script_snippet],
            timeout=self._config.timeouts.script_path,
        )
        if completed is None:
            return ProbeResult(ok=False, detail=error, step=ProbeStep.SCRIPT_PATH)
        reported = completed.stdout.strip()
        if not reported:
            return ProbeResult(ok=False, detail="scripts directory not reported", step=ProbeStep.SCRIPT_PATH)
        for candidate in (Path(reported), Path(f"{reported}.exe")):
            if candidate.is_file():
                return self._check_script_version(candidate)
        return ProbeResult(ok=False, detail=f"{reported} does not exist", step=ProbeStep.SCRIPT_PATH)

    def _check_script_version(self, script: Path) -> ProbeResult:
        # An npm wrapper can share the name; only the engine answers with a version payload.
        completed, error = self._call([str(script), "--version", "--json"], timeout=self._config.timeouts.module_run)
        if completed is None:
            return ProbeResult(ok=False, detail=f"{script}: {error}", step=ProbeStep.SCRIPT_PATH)
        if not _reports_version(completed.stdout):
            return ProbeResult(ok=False, detail=f"{script} did not report a JSON version", step=ProbeStep.SCRIPT_PATH)
        return ProbeResult(ok=True, detail=str(script), step=ProbeStep.SCRIPT_PATH, engine_path=script)

    def _check_import_spec(self, interpreter: str) -> ProbeResult:
        completed, error = self._call(
            [interpreter, "-c", self._import_snippet],
            timeout=self._config.timeouts.import_check,
        )
        if completed is None:
            return ProbeResult(ok=False, detail=error, step=ProbeStep.IMPORT_SPEC)
        if completed.stdout.strip() == "1":
            return ProbeResult(ok=True, detail="import spec found", step=ProbeStep.IMPORT_SPEC)
        return ProbeResult(ok=False, detail="import spec missing", step=ProbeStep.IMPORT_SPEC)

    def _check_module_run(self, interpreter: str) -> ProbeResult:
        completed, error = self._call(
            [interpreter, "-m", self._config.engine.module, "--version", "--json"],
            timeout=self._config.timeouts.module_run,
        )
        if completed is None:
            return ProbeResult(ok=False, detail=error, step=ProbeStep.MODULE_RUN)
        return ProbeResult(ok=True, detail=completed.stdout.strip() or None, step=ProbeStep.MODULE_RUN)

    def _call(self, args: list[str], *, timeout: float) -> tuple[CompletedProcess[str] | None, str]:
        options = CommandOptions(
            capture_output=True,
            check=True,
            timeout=timeout,
            discard_stdin=True,
            env=self._config.env or None,
        )
        try:
            return self._runner(args, options=options), ""
        except SubprocessExecutionError as exc:
            if exc.returncode == TIMEOUT_EXIT_CODE:
                return None, f"timed out after {timeout:.1f}s"
            return None, (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        except (OSError, ValueError) as exc:
            return None, str(exc)


def _reports_version(output: str) -> bool:
    try:
        payload = json.loads(output)
    except json.JSONDecodeError:
        return False
    return isinstance(payload, dict) and "version" in payload


__all__ = ["InterpreterProbe"]
