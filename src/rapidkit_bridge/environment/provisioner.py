# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provision the tool-owned virtual environment that hosts the engine."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, ValidationError

from ..cache.store import JsonFileStore
from ..config import BridgeConfig
from ..errors import BridgeError, BridgeErrorCode
from ..process_utils import CommandOptions, CommandRunner, SubprocessExecutionError, run_command
from .constants import BridgeCacheLayout
from .probe import InterpreterProbe

LOGGER = logging.getLogger(__name__)

PIP_QUIET_ENV: Final[dict[str, str]] = {
    "PIP_DISABLE_PIP_VERSION_CHECK": "1",
    "PIP_NO_PYTHON_VERSION_WARNING": "1",
}


class InstallMarker(BaseModel):
    """Record of what was installed into the bridge environment."""

    model_config = ConfigDict(extra="ignore")

    requirement: str
    base_interpreter: str | None = None
    installed_at: str | None = None


class EnvironmentProvisioner:
    """Create the isolated environment and install the engine into it.

    ``ensure`` is idempotent: an environment whose interpreter exists, whose
    install marker names the configured requirement and that passes a probe is
    reused without any install call. A half-created environment left behind
    by a concurrent or interrupted run fails that check and is repaired in
    place by running ``venv`` over it before installing.
    """

    def __init__(
        self,
        config: BridgeConfig,
        *,
        probe: InterpreterProbe,
        runner: CommandRunner = run_command,
        store: JsonFileStore | None = None,
    ) -> None:
        self._config = config
        self._probe = probe
        self._runner = runner
        self._store = store or JsonFileStore()
        self._layout = BridgeCacheLayout(config.cache_root)

    @property
    def layout(self) -> BridgeCacheLayout:
        return self._layout

    def is_ready(self) -> bool:
        """Return whether the environment can be reused without reinstalling."""

        python = self._layout.venv_python
        if not python.exists():
            return False
        marker = self._read_marker()
        if marker is not None and marker.requirement != self._config.install_target:
            LOGGER.debug(
                "bridge environment requirement changed from %s to %s",
                marker.requirement,
                self._config.install_target,
            )
            return False
        return self._probe.probe(python).ok

    def ensure(self, base_interpreter: str | Path) -> Path:
        """Return the interpreter inside the bridge environment, provisioning it if needed.

        Args:
            base_interpreter: System interpreter used to create the environment.

        Returns:
            Path: Interpreter path inside the environment.

        Raises:
            BridgeError: With code ``venv-create-failed`` when the environment
                cannot be created or the engine cannot be installed.
        """

        python = self._layout.venv_python
        if self.is_ready():
            LOGGER.debug("reusing bridge environment at %s", self._layout.venv_dir)
            return python

        try:
            self._layout.ensure_directories()
        except OSError as exc:
            raise BridgeError(BridgeErrorCode.VENV_CREATE_FAILED, str(exc)) from exc

        timeouts = self._config.timeouts
        # venv over an existing directory restores a missing pip.
        LOGGER.debug("creating bridge environment at %s", self._layout.venv_dir)
        create = [str(base_interpreter), "-m", "venv", str(self._layout.venv_dir)]
        self._invoke(create, timeout=timeouts.venv_create)
        if self._config.upgrade_pip:
            self._invoke([str(python), "-m", "pip", "install", "-U", "pip"], timeout=timeouts.install)
        requirement = self._config.install_target
        LOGGER.debug("installing %s into the bridge environment", requirement)
        self._invoke([str(python), "-m", "pip", "install", "-U", requirement], timeout=timeouts.install)

        marker = InstallMarker(
            requirement=requirement,
            base_interpreter=str(base_interpreter),
            installed_at=datetime.now(UTC).isoformat(),
        )
        self._store.try_write(self._layout.install_marker, marker.model_dump())
        return python

    def _invoke(self, args: Sequence[str], *, timeout: float) -> None:
        env = dict(self._config.env or os.environ)
        env.update(PIP_QUIET_ENV)
        options = CommandOptions(
            env=env,
            capture_output=True,
            check=True,
            timeout=timeout,
            discard_stdin=True,
        )
        try:
            self._runner(list(args), options=options)
        except SubprocessExecutionError as exc:
            output = (exc.stderr or "").strip() or (exc.stdout or "").strip()
            detail = f"{' '.join(args)} exited with status {exc.returncode}"
            raise BridgeError(BridgeErrorCode.VENV_CREATE_FAILED, f"{detail}\n{output}" if output else detail) from exc
        except (OSError, ValueError) as exc:
            raise BridgeError(BridgeErrorCode.VENV_CREATE_FAILED, f"{' '.join(args)}: {exc}") from exc

    def _read_marker(self) -> InstallMarker | None:
        payload = self._store.read(self._layout.install_marker)
        if payload is None:
            return None
        try:
            return InstallMarker.model_validate(payload)
        except ValidationError:
            return None


__all__ = ["PIP_QUIET_ENV", "EnvironmentProvisioner", "InstallMarker"]
