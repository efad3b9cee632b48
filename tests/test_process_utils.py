# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the subprocess wrapper."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from rapidkit_bridge import process_utils
from rapidkit_bridge.process_utils import (
    TIMEOUT_EXIT_CODE,
    CommandOptions,
    SubprocessExecutionError,
    run_command,
)


def test_timeout_is_reported_as_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(args, **kwargs):  # noqa: ANN001, ANN003
        raise subprocess.TimeoutExpired(args, kwargs["timeout"], output=b"partial", stderr=None)

    monkeypatch.setattr(process_utils.subprocess, "run", fake_run)

    completed = run_command(
        [sys.executable, "-c", "pass"],
        options=CommandOptions(check=False, capture_output=True, timeout=2.0),
    )

    assert completed.returncode == TIMEOUT_EXIT_CODE
    assert completed.stdout == "partial"
    assert completed.stderr == "Command timed out after 2.0s"


def test_check_raises_with_captured_streams(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(args, **kwargs):  # noqa: ANN001, ANN003
        return subprocess.CompletedProcess(args, 3, "out", "bad things")

    monkeypatch.setattr(process_utils.subprocess, "run", fake_run)

    with pytest.raises(SubprocessExecutionError) as excinfo:
        run_command([sys.executable, "-V"], options=CommandOptions(capture_output=True))

    assert excinfo.value.returncode == 3
    assert excinfo.value.stderr == "bad things"
    assert "bad things" in str(excinfo.value)


def test_options_are_forwarded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    seen: dict[str, object] = {}

    def fake_run(args, **kwargs):  # noqa: ANN001, ANN003
        seen.update(kwargs)
        return subprocess.CompletedProcess(args, 0, "", "")

    monkeypatch.setattr(process_utils.subprocess, "run", fake_run)

    run_command(
        [sys.executable, "-V"],
        options=CommandOptions(cwd=tmp_path, env={"A": "1"}, discard_stdin=True, timeout=1.5),
    )

    assert seen["cwd"] == str(tmp_path)
    assert seen["env"] == {"A": "1"}
    assert seen["stdin"] is subprocess.DEVNULL
    assert seen["timeout"] == 1.5
    assert seen["check"] is False


def test_missing_executable_raises_file_not_found() -> None:
    with pytest.raises(FileNotFoundError):
        run_command(["rapidkit-bridge-definitely-missing-binary"])


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ValueError):
        run_command([])


def test_with_overrides_validates_names_and_timeout() -> None:
    options = CommandOptions()

    assert options.with_overrides(timeout=3.0).timeout == 3.0
    with pytest.raises(TypeError):
        options.with_overrides(shell=True)
    with pytest.raises(ValueError):
        options.with_overrides(timeout=-1)
