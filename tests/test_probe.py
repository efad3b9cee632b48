# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the interpreter probe cascade."""

from __future__ import annotations

from pathlib import Path

from rapidkit_bridge.config import BridgeConfig
from rapidkit_bridge.environment.models import ProbeStep
from rapidkit_bridge.environment.probe import InterpreterProbe
from tests.helpers.runner import ScriptedRunner, make_executable

PYTHON = "/opt/python/bin/python3"


def _script_step(argv: list[str]) -> bool:
    return "-c" in argv and "sysconfig" in argv[-1]


def _import_step(argv: list[str]) -> bool:
    return "-c" in argv and "find_spec" in argv[-1]


def test_script_path_step_short_circuits(config: BridgeConfig, runner: ScriptedRunner, tmp_path: Path) -> None:
    script = make_executable(tmp_path / "bin" / "rapidkit")
    runner.add(_script_step, stdout=f"{script}\n")
    runner.add((str(script), "--version", "--json"), stdout='{"schema_version": 1, "version": "0.2.0"}')

    result = InterpreterProbe(config, runner=runner).probe(PYTHON)

    assert result.ok
    assert result.step is ProbeStep.SCRIPT_PATH
    assert result.engine_path == script
    assert len(runner.calls) == 2


def test_script_that_is_not_the_engine_is_skipped(config: BridgeConfig, runner: ScriptedRunner, tmp_path: Path) -> None:
    wrapper = make_executable(tmp_path / "bin" / "rapidkit", "#!/usr/bin/env node\n")
    runner.add(_script_step, stdout=str(wrapper))
    runner.add((str(wrapper), "--version", "--json"), stdout="rapidkit npm wrapper 0.14.0\n")
    runner.add(_import_step, stdout="0")
    runner.add(("-m", "rapidkit"), returncode=1, stderr="No module named rapidkit")

    result = InterpreterProbe(config, runner=runner).probe(PYTHON)

    assert not result.ok
    assert result.engine_path is None
    assert runner.count(str(wrapper), "--version", "--json") == 1


def test_script_without_version_key_falls_through_to_import_spec(
    config: BridgeConfig, runner: ScriptedRunner, tmp_path: Path
) -> None:
    script = make_executable(tmp_path / "bin" / "rapidkit")
    runner.add(_script_step, stdout=str(script))
    runner.add((str(script), "--version", "--json"), stdout='{"name": "rapidkit"}')
    runner.add(_import_step, stdout="1")

    result = InterpreterProbe(config, runner=runner).probe(PYTHON)

    assert result.ok
    assert result.step is ProbeStep.IMPORT_SPEC
    assert result.engine_path is None


def test_import_spec_step_requires_literal_one(config: BridgeConfig, runner: ScriptedRunner, tmp_path: Path) -> None:
    runner.add(_script_step, stdout=str(tmp_path / "missing" / "rapidkit"))
    runner.add(_import_step, stdout="1\n")

    result = InterpreterProbe(config, runner=runner).probe(PYTHON)

    assert result.ok
    assert result.step is ProbeStep.IMPORT_SPEC
    assert result.engine_path is None
    assert runner.count("-m", "rapidkit") == 0


def test_module_run_step_accepts_zero_exit(config: BridgeConfig, runner: ScriptedRunner) -> None:
    runner.add(_script_step, returncode=1, stderr="boom")
    runner.add(_import_step, stdout="0")
    runner.add(("-m", "rapidkit", "--version", "--json"), stdout='{"schema_version": 1, "version": "0.2.0"}')

    result = InterpreterProbe(config, runner=runner).probe(PYTHON)

    assert result.ok
    assert result.step is ProbeStep.MODULE_RUN


def test_probe_fails_without_raising_when_every_step_fails(config: BridgeConfig, runner: ScriptedRunner) -> None:
    runner.add(_script_step, raises=PermissionError("denied"))
    runner.add(_import_step, returncode=124, stderr="Command timed out after 2.0s")
    runner.add(("-m", "rapidkit"), returncode=2, stderr="No module named rapidkit")

    result = InterpreterProbe(config, runner=runner).probe(PYTHON)

    assert not result.ok
    assert result.detail == "No module named rapidkit"
    assert len(runner.calls) == 3


def test_missing_interpreter_is_a_failed_probe(config: BridgeConfig, runner: ScriptedRunner) -> None:
    result = InterpreterProbe(config, runner=runner).probe("/nonexistent/python")

    assert not result.ok
    assert result.detail


def test_probe_steps_use_configured_timeouts(config: BridgeConfig, runner: ScriptedRunner) -> None:
    InterpreterProbe(config, runner=runner).probe(PYTHON)

    timeouts = [options.timeout for options in runner.options]
    assert timeouts == [
        config.timeouts.script_path,
        config.timeouts.import_check,
        config.timeouts.module_run,
    ]
    assert all(options.discard_stdin for options in runner.options)
