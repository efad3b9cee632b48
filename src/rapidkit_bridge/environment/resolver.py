# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve the execution target used for every engine invocation in a process."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from ..config import BridgeConfig
from ..errors import BridgeError, BridgeErrorCode
from .constants import WORKSPACE_SEARCH_DEPTH, WORKSPACE_VENV_DIRNAME, venv_python, venv_script
from .models import IsolatedEnvTarget, SystemTarget
from .probe import InterpreterProbe
from .provisioner import EnvironmentProvisioner
from .strategies import InstallationScanner

LOGGER = logging.getLogger(__name__)

BASE_INTERPRETERS = ("python3", "python")


class RuntimeResolver:
    """Pick a system installation of the engine or fall back to the bridge environment.

    The first resolution is memoised on the instance, so one resolver
    constructed per process scans at most once. A failed resolution is
    memoised too and raised again instead of provisioning a second time.
    """

    def __init__(
        self,
        config: BridgeConfig,
        *,
        scanner: InstallationScanner,
        provisioner: EnvironmentProvisioner,
        probe: InterpreterProbe,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._config = config
        self._scanner = scanner
        self._provisioner = provisioner
        self._probe = probe
        self._which = which
        self._target: SystemTarget | IsolatedEnvTarget | None = None
        self._failure: BridgeError | None = None
        self._workspace_targets: dict[Path, SystemTarget | None] = {}

    @property
    def cached_target(self) -> SystemTarget | IsolatedEnvTarget | None:
        return self._target

    def resolve(self) -> SystemTarget | IsolatedEnvTarget:
        """Return the process-wide execution target.

        Returns:
            SystemTarget | IsolatedEnvTarget: System installation when one is
            discovered, otherwise the provisioned bridge environment.

        Raises:
            BridgeError: ``engine-not-found`` when no base interpreter exists,
                or ``venv-create-failed`` when provisioning fails.
        """

        if self._target is not None:
            return self._target
        if self._failure is not None:
            raise self._failure
        try:
            self._target = self._resolve_uncached()
        except BridgeError as exc:
            self._failure = exc
            raise
        return self._target

    def _resolve_uncached(self) -> SystemTarget | IsolatedEnvTarget:
        if self._config.force_venv:
            LOGGER.debug("isolated environment forced; skipping installation scan")
        else:
            found = self._scanner.scan()
            if found is not None:
                LOGGER.debug("resolved system engine via %s: %s", found.source, found.interpreter_path)
                return found

        base = self._base_interpreter()
        interpreter = self._provisioner.ensure(base)
        layout = self._provisioner.layout
        script = layout.venv_script(self._config.engine.script)
        LOGGER.debug("resolved isolated engine environment at %s", layout.venv_dir)
        return IsolatedEnvTarget(
            interpreter_path=interpreter,
            env_root=layout.venv_dir,
            engine_path=script if script.exists() else None,
        )

    def resolve_for(self, cwd: Path | None) -> SystemTarget | IsolatedEnvTarget:
        """Return the target for work rooted at ``cwd``.

        A project-local ``.venv`` found in ``cwd`` or one of its parents takes
        precedence when its interpreter reaches the engine.

        Args:
            cwd: Working directory of the engine invocation.

        Returns:
            SystemTarget | IsolatedEnvTarget: Workspace target or the process-wide target.
        """

        if cwd is not None and self._config.prefer_workspace_env and not self._config.force_venv:
            workspace = self._workspace_target(cwd)
            if workspace is not None:
                return workspace
        return self.resolve()

    def _workspace_target(self, cwd: Path) -> SystemTarget | None:
        start = cwd.resolve()
        for depth, directory in enumerate((start, *start.parents)):
            if depth >= WORKSPACE_SEARCH_DEPTH:
                break
            env_root = directory / WORKSPACE_VENV_DIRNAME
            if env_root in self._workspace_targets:
                cached = self._workspace_targets[env_root]
                if cached is not None:
                    return cached
                continue
            python = venv_python(env_root)
            if not python.exists():
                continue
            result = self._probe.probe(python)
            target: SystemTarget | None = None
            if result.ok:
                script = venv_script(env_root, self._config.engine.script)
                target = SystemTarget(
                    interpreter_path=python,
                    engine_path=result.engine_path or (script if script.exists() else None),
                    source="workspace",
                )
                LOGGER.debug("using workspace environment %s", env_root)
            self._workspace_targets[env_root] = target
            if target is not None:
                return target
        return None

    def _base_interpreter(self) -> Path:
        for name in BASE_INTERPRETERS:
            located = self._which(name)
            if located:
                return Path(located)
        raise BridgeError(BridgeErrorCode.ENGINE_NOT_FOUND, "neither python3 nor python is on PATH")


__all__ = ["RuntimeResolver"]
