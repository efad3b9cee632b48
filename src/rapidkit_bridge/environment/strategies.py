# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Installation discovery strategies tried before provisioning a fallback environment."""

from __future__ import annotations

import json
import logging
import re
import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from packaging.utils import canonicalize_name

from ..config import BridgeConfig
from ..process_utils import CommandOptions, CommandRunner, SubprocessExecutionError, run_command
from .constants import IS_WINDOWS, venv_python, venv_script
from .models import SystemTarget
from .probe import InterpreterProbe

LOGGER = logging.getLogger(__name__)

INTERPRETER_CANDIDATES: Final[tuple[str, ...]] = (
    "python3",
    "python",
    "python3.13",
    "python3.12",
    "python3.11",
    "python3.10",
)
PIP_COMMANDS: Final[tuple[str, ...]] = ("pip", "pip3")
_NAME_LINE: Final[re.Pattern[str]] = re.compile(r"^Name:\s*(\S+)\s*$", re.MULTILINE)
_PYTHON_DIR: Final[re.Pattern[str]] = re.compile(r"python(3\.\d+)", re.IGNORECASE)
_VERSIONED_DIR: Final[re.Pattern[str]] = re.compile(r"Python(3)(\d+)$")

Which = Callable[[str], str | None]


@dataclass(frozen=True, slots=True)
class ScanContext:
    """Shared collaborators handed to every discovery strategy.

    Attributes:
        config: Bridge configuration supplying engine names and timeouts.
        probe: Interpreter probe used to confirm candidates.
        runner: Subprocess runner used for tool listings.
        which: ``PATH`` lookup returning an absolute executable path.
        cwd: Working directory for project-scoped tools such as poetry.
    """

    config: BridgeConfig
    probe: InterpreterProbe
    runner: CommandRunner = run_command
    which: Which = shutil.which
    cwd: Path = field(default_factory=Path.cwd)

    @property
    def distribution(self) -> str:
        return canonicalize_name(self.config.engine.distribution)

    def capture(self, args: Sequence[str], *, cwd: Path | None = None) -> str | None:
        """Return stdout of ``args`` or ``None`` when the tool is absent, hangs or fails.

        Args:
            args: Command and arguments to execute.
            cwd: Optional working directory for the command.

        Returns:
            str | None: Captured standard output on a zero exit status.
        """

        options = CommandOptions(
            cwd=cwd,
            env=self.config.env or None,
            capture_output=True,
            check=True,
            timeout=self.config.timeouts.strategy,
            discard_stdin=True,
        )
        try:
            completed = self.runner(list(args), options=options)
        except (OSError, ValueError, SubprocessExecutionError) as exc:
            LOGGER.debug("strategy command %s unavailable: %s", args[0], exc)
            return None
        return completed.stdout or ""

    def lookup(self, name: str) -> Path | None:
        """Return the absolute path of executable ``name`` when on ``PATH``."""

        resolved = self.which(name)
        return Path(resolved) if resolved else None

    def probe_target(self, interpreter: str | Path, *, source: str) -> SystemTarget | None:
        """Probe ``interpreter`` and wrap a success as a :class:`SystemTarget`.

        Args:
            interpreter: Absolute interpreter path or a name looked up on ``PATH``.
            source: Strategy name recorded on the target.

        Returns:
            SystemTarget | None: Target when the probe succeeds.
        """

        path = Path(interpreter)
        if not path.is_absolute():
            located = self.lookup(str(interpreter))
            if located is None:
                return None
            path = located
        if not path.exists():
            return None
        result = self.probe.probe(path)
        if not result.ok:
            return None
        return SystemTarget(interpreter_path=path, engine_path=result.engine_path, source=source)

    def matches_distribution(self, pip_show_output: str | None) -> bool:
        """Return whether ``pip show`` output describes the engine distribution."""

        if not pip_show_output:
            return False
        match = _NAME_LINE.search(pip_show_output)
        return bool(match) and canonicalize_name(match.group(1)) == self.distribution

    def system_interpreter(self) -> Path | None:
        """Return the first of ``python3``/``python`` found on ``PATH``."""

        for name in ("python3", "python"):
            located = self.lookup(name)
            if located is not None:
                return located
        return None

    def target_in_env(self, env_root: Path, *, source: str) -> SystemTarget | None:
        """Return a target for the virtual environment ``env_root`` when it has an interpreter."""

        interpreter = venv_python(env_root)
        if not interpreter.exists():
            return None
        script = venv_script(env_root, self.config.engine.script)
        return SystemTarget(
            interpreter_path=interpreter,
            engine_path=script if script.exists() else None,
            source=source,
        )


class DiscoveryStrategy(ABC):
    """One installation-discovery technique tried during a scan."""

    name: str = "strategy"

    @abstractmethod
    def discover(self, context: ScanContext) -> SystemTarget | None:
        """Return a target when this strategy finds a usable engine installation.

        Args:
            context: Shared collaborators and configuration.

        Returns:
            SystemTarget | None: Target, or ``None`` when the strategy is
            unavailable or finds nothing.
        """


class InterpreterStrategy(DiscoveryStrategy):
    """Probe well-known interpreter names found on ``PATH``."""

    name = "interpreters"

    def __init__(self, candidates: Sequence[str] = INTERPRETER_CANDIDATES) -> None:
        self._candidates = tuple(candidates)

    def discover(self, context: ScanContext) -> SystemTarget | None:
        seen: set[Path] = set()
        for candidate in self._candidates:
            located = context.lookup(candidate)
            if located is None or located in seen:
                continue
            seen.add(located)
            target = context.probe_target(located, source=self.name)
            if target is not None:
                return target
        return None


class PipMetadataStrategy(DiscoveryStrategy):
    """Ask ``pip show`` whether the engine distribution is installed."""

    name = "pip-metadata"

    def discover(self, context: ScanContext) -> SystemTarget | None:
        for pip in PIP_COMMANDS:
            pip_path = context.lookup(pip)
            if pip_path is None:
                continue
            shown = context.capture([str(pip_path), "show", context.config.engine.distribution])
            if not context.matches_distribution(shown):
                continue
            interpreter = _shebang_interpreter(pip_path, context.lookup) or context.system_interpreter()
            if interpreter is None:
                continue
            script = pip_path.parent / context.config.engine.script
            return SystemTarget(
                interpreter_path=interpreter,
                engine_path=script if script.is_file() else None,
                source=self.name,
            )
        return None


class PyenvStrategy(DiscoveryStrategy):
    """Inspect every pyenv-managed Python version for the engine distribution."""

    name = "pyenv"

    def discover(self, context: ScanContext) -> SystemTarget | None:
        pyenv = context.lookup("pyenv")
        if pyenv is None:
            return None
        listing = context.capture([str(pyenv), "versions", "--bare"])
        if not listing:
            return None
        root = self._root(context, pyenv)
        for version in _non_empty_lines(listing):
            bin_dir = root / "versions" / version / "bin"
            pip = bin_dir / "pip"
            if not pip.exists():
                continue
            shown = context.capture([str(pip), "show", context.config.engine.distribution])
            if not context.matches_distribution(shown):
                continue
            for name in ("python", "python3"):
                interpreter = bin_dir / name
                if interpreter.exists():
                    script = bin_dir / context.config.engine.script
                    return SystemTarget(
                        interpreter_path=interpreter,
                        engine_path=script if script.is_file() else None,
                        source=self.name,
                    )
        return None

    @staticmethod
    def _root(context: ScanContext, pyenv: Path) -> Path:
        configured = context.config.env.get("PYENV_ROOT", "").strip()
        if configured:
            return Path(configured).expanduser()
        reported = (context.capture([str(pyenv), "root"]) or "").strip()
        if reported:
            return Path(reported)
        return context.config.home / ".pyenv"


class UserSiteStrategy(DiscoveryStrategy):
    """Look for the engine package directory in user-level site-packages."""

    name = "user-site"

    def discover(self, context: ScanContext) -> SystemTarget | None:
        for site_dir in self._site_dirs(context):
            if not any((site_dir / package).is_dir() for package in context.config.engine.package_dirs):
                continue
            interpreter = None
            version = _site_python_version(site_dir)
            if version is not None:
                interpreter = context.lookup(f"python{version}")
            interpreter = interpreter or context.system_interpreter()
            if interpreter is not None:
                return SystemTarget(interpreter_path=interpreter, source=self.name)
        return None

    @staticmethod
    def _site_dirs(context: ScanContext) -> Iterator[Path]:
        home = context.config.home
        patterns = [
            (home / ".local" / "lib", "python3.*/site-packages"),
            (home / "Library" / "Python", "3.*/lib/python/site-packages"),
        ]
        appdata = context.config.env.get("APPDATA", "").strip()
        if appdata:
            patterns.append((Path(appdata) / "Python", "Python3*/site-packages"))
        for base, pattern in patterns:
            if base.is_dir():
                yield from sorted(base.glob(pattern), reverse=True)


class PipxStrategy(DiscoveryStrategy):
    """Find an engine installed as a pipx application."""

    name = "pipx"

    def discover(self, context: ScanContext) -> SystemTarget | None:
        pipx = context.lookup("pipx")
        if pipx is None:
            return None
        listing = context.capture([str(pipx), "list", "--json"])
        if not listing:
            return None
        try:
            payload = json.loads(listing)
        except json.JSONDecodeError:
            return None
        venvs = payload.get("venvs") if isinstance(payload, dict) else None
        if not isinstance(venvs, dict):
            return None
        venv_name = next((name for name in venvs if canonicalize_name(name) == context.distribution), None)
        if venv_name is None:
            return None
        for venvs_dir in self._venv_dirs(context, pipx):
            target = context.target_in_env(venvs_dir / venv_name, source=self.name)
            if target is not None:
                return target
        return None

    @staticmethod
    def _venv_dirs(context: ScanContext, pipx: Path) -> list[Path]:
        dirs: list[Path] = []
        reported = (context.capture([str(pipx), "environment", "--value", "PIPX_LOCAL_VENVS"]) or "").strip()
        if reported:
            dirs.append(Path(reported))
        home = context.config.home
        dirs.extend([home / ".local" / "share" / "pipx" / "venvs", home / ".local" / "pipx" / "venvs"])
        return dirs


class PoetryStrategy(DiscoveryStrategy):
    """Use the poetry-managed environment of the current project."""

    name = "poetry"

    def discover(self, context: ScanContext) -> SystemTarget | None:
        poetry = context.lookup("poetry")
        if poetry is None:
            return None
        if context.capture([str(poetry), "show", context.config.engine.distribution], cwd=context.cwd) is None:
            return None
        executable = (context.capture([str(poetry), "env", "info", "--executable"], cwd=context.cwd) or "").strip()
        if not executable:
            return None
        interpreter = Path(executable)
        if not interpreter.exists():
            return None
        script = interpreter.parent / context.config.engine.script
        return SystemTarget(
            interpreter_path=interpreter,
            engine_path=script if script.is_file() else None,
            source=self.name,
        )


class CondaStrategy(DiscoveryStrategy):
    """Check the active conda environment for the engine distribution."""

    name = "conda"

    def discover(self, context: ScanContext) -> SystemTarget | None:
        conda = context.lookup("conda")
        if conda is None:
            return None
        packages = _load_json(context.capture([str(conda), "list", context.config.engine.distribution, "--json"]))
        if not isinstance(packages, list):
            return None
        installed = any(
            isinstance(entry, dict) and canonicalize_name(str(entry.get("name", ""))) == context.distribution
            for entry in packages
        )
        if not installed:
            return None
        info = _load_json(context.capture([str(conda), "info", "--json"]))
        if not isinstance(info, dict):
            return None
        prefix = info.get("active_prefix") or info.get("default_prefix")
        if not isinstance(prefix, str) or not prefix:
            return None
        root = Path(prefix)
        interpreter = root / "python.exe" if IS_WINDOWS else root / "bin" / "python"
        if not interpreter.exists():
            return None
        script = interpreter.parent / context.config.engine.script
        return SystemTarget(
            interpreter_path=interpreter,
            engine_path=script if script.is_file() else None,
            source=self.name,
        )


def default_strategies() -> tuple[DiscoveryStrategy, ...]:
    """Return the discovery strategies in priority order."""

    return (
        InterpreterStrategy(),
        PipMetadataStrategy(),
        PyenvStrategy(),
        UserSiteStrategy(),
        PipxStrategy(),
        PoetryStrategy(),
        CondaStrategy(),
    )


class InstallationScanner:
    """Iterate discovery strategies until one yields an execution target."""

    def __init__(
        self,
        context: ScanContext,
        strategies: Sequence[DiscoveryStrategy] | None = None,
    ) -> None:
        self._context = context
        self._strategies = tuple(strategies) if strategies is not None else default_strategies()

    @property
    def strategies(self) -> tuple[DiscoveryStrategy, ...]:
        return self._strategies

    def scan(self) -> SystemTarget | None:
        """Return the first target found, or ``None`` when every strategy is exhausted."""

        for strategy in self._strategies:
            try:
                target = strategy.discover(self._context)
            except OSError as exc:
                LOGGER.debug("strategy %s unavailable: %s", strategy.name, exc)
                continue
            if target is not None:
                LOGGER.debug("strategy %s found %s", strategy.name, target.interpreter_path)
                return target
            LOGGER.debug("strategy %s found nothing", strategy.name)
        return None


def _non_empty_lines(text: str) -> Iterator[str]:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            yield stripped


def _load_json(text: str | None) -> object:
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _site_python_version(site_dir: Path) -> str | None:
    for part in reversed(site_dir.parts):
        match = _PYTHON_DIR.fullmatch(part)
        if match:
            return match.group(1)
        match = _VERSIONED_DIR.search(part)
        if match:
            return f"{match.group(1)}.{match.group(2)}"
    return None


def _shebang_interpreter(script: Path, lookup: Callable[[str], Path | None]) -> Path | None:
    """Return the interpreter named by the shebang of ``script`` when it exists.

    ``#!/usr/bin/env python3`` style lines are resolved through ``lookup``.
    """

    try:
        with script.open("rb") as handle:
            first_line = handle.readline(512).decode(errors="ignore").strip()
    except OSError:
        return None
    if not first_line.startswith("#!"):
        return None
    parts = first_line[2:].split()
    if not parts:
        return None
    candidate = Path(parts[0])
    if candidate.name == "env" and len(parts) > 1:
        return lookup(parts[1])
    if candidate.name.startswith("python") and candidate.exists():
        return candidate
    return None


__all__ = [
    "CondaStrategy",
    "DiscoveryStrategy",
    "InstallationScanner",
    "InterpreterStrategy",
    "PipMetadataStrategy",
    "PipxStrategy",
    "PoetryStrategy",
    "PyenvStrategy",
    "ScanContext",
    "UserSiteStrategy",
    "default_strategies",
]
