# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cache layout helpers shared by the provisioner and the caches."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

VENV_SUBDIR: Final[str] = "venv"
MODULES_SUBDIR: Final[str] = "modules"
COMMANDS_CACHE_FILENAME: Final[str] = "core-commands.json"
INSTALL_MARKER_FILENAME: Final[str] = "bridge-installed.json"
WORKSPACE_VENV_DIRNAME: Final[str] = ".venv"
WORKSPACE_SEARCH_DEPTH: Final[int] = 25
IS_WINDOWS: Final[bool] = os.name == "nt"


def venv_bin_dir(env_root: Path) -> Path:
    """Return the directory holding executables inside ``env_root``."""

    return env_root / ("Scripts" if IS_WINDOWS else "bin")


def venv_python(env_root: Path) -> Path:
    """Return the interpreter path inside the virtual environment ``env_root``."""

    return venv_bin_dir(env_root) / ("python.exe" if IS_WINDOWS else "python")


def venv_script(env_root: Path, name: str) -> Path:
    """Return the console-script path ``name`` inside ``env_root``."""

    return venv_bin_dir(env_root) / (f"{name}.exe" if IS_WINDOWS else name)


@dataclass(frozen=True, slots=True)
class BridgeCacheLayout:
    """Model the bridge cache directories.

    Attributes:
        cache_dir: Base directory owned by the bridge, normally
            ``$XDG_CACHE_HOME/rapidkit/bridge``.
    """

    cache_dir: Path

    @property
    def venv_dir(self) -> Path:
        return self.cache_dir / VENV_SUBDIR

    @property
    def venv_python(self) -> Path:
        return venv_python(self.venv_dir)

    @property
    def install_marker(self) -> Path:
        return self.venv_dir / INSTALL_MARKER_FILENAME

    @property
    def commands_cache(self) -> Path:
        return self.cache_dir / COMMANDS_CACHE_FILENAME

    @property
    def modules_dir(self) -> Path:
        return self.cache_dir / MODULES_SUBDIR

    def venv_script(self, name: str) -> Path:
        """Return the console-script path ``name`` inside the bridge environment."""

        return venv_script(self.venv_dir, name)

    def modules_cache(self, key: str) -> Path:
        """Return the catalog cache file for the filter ``key``."""

        return self.modules_dir / f"modules-catalog-{key}.json"

    def ensure_directories(self) -> None:
        """Create the cache directory tree when missing."""

        for directory in (self.cache_dir, self.modules_dir):
            directory.mkdir(parents=True, exist_ok=True)


__all__ = [
    "COMMANDS_CACHE_FILENAME",
    "INSTALL_MARKER_FILENAME",
    "WORKSPACE_SEARCH_DEPTH",
    "WORKSPACE_VENV_DIRNAME",
    "BridgeCacheLayout",
    "venv_bin_dir",
    "venv_python",
    "venv_script",
]
