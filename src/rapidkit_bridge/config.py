# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bridge configuration built once per process from environment switches."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

FORCE_VENV_ENV: Final[str] = "RAPIDKIT_BRIDGE_FORCE_VENV"
UPGRADE_PIP_ENV: Final[str] = "RAPIDKIT_BRIDGE_UPGRADE_PIP"
CORE_PACKAGE_ENV: Final[str] = "RAPIDKIT_CORE_PYTHON_PACKAGE"
DEV_PATH_ENV: Final[str] = "RAPIDKIT_DEV_PATH"
DEBUG_ENV: Final[str] = "RAPIDKIT_DEBUG"
XDG_CACHE_ENV: Final[str] = "XDG_CACHE_HOME"

DEFAULT_COMMANDS_TTL_MS: Final[int] = 24 * 60 * 60 * 1000
DEFAULT_MODULES_TTL_MS: Final[int] = 30 * 60 * 1000
MIN_ENGINE_VERSION: Final[str] = "0.2.0"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


class ConfigError(ValueError):
    """Raised when environment switches describe an unusable configuration."""


class EngineSpec(BaseModel):
    """Names under which the companion engine is published and imported."""

    model_config = ConfigDict(frozen=True)

    module: str = "rapidkit"
    distribution: str = "rapidkit-core"
    script: str = "rapidkit"
    package_dirs: tuple[str, ...] = ("rapidkit", "rapidkit_core")
    min_version: str = MIN_ENGINE_VERSION


class ProbeTimeouts(BaseModel):
    """Per-call subprocess timeouts expressed in seconds."""

    model_config = ConfigDict(frozen=True)

    script_path: float = Field(default=2.0, gt=0)
    import_check: float = Field(default=2.0, gt=0)
    module_run: float = Field(default=8.0, gt=0)
    strategy: float = Field(default=5.0, gt=0)
    venv_create: float = Field(default=120.0, gt=0)
    install: float = Field(default=900.0, gt=0)
    engine_call: float = Field(default=8.0, gt=0)
    discovery: float = Field(default=15.0, gt=0)


class BridgeConfig(BaseModel):
    """Explicit configuration threaded through every bridge component."""

    model_config = ConfigDict(frozen=True)

    engine: EngineSpec = Field(default_factory=EngineSpec)
    timeouts: ProbeTimeouts = Field(default_factory=ProbeTimeouts)
    cache_root: Path
    home: Path
    force_venv: bool = False
    upgrade_pip: bool = False
    debug: bool = False
    core_package: str | None = None
    dev_path: Path | None = None
    prefer_workspace_env: bool = True
    commands_ttl_ms: int = Field(default=DEFAULT_COMMANDS_TTL_MS, gt=0)
    modules_ttl_ms: int = Field(default=DEFAULT_MODULES_TTL_MS, gt=0)
    env: dict[str, str] = Field(default_factory=dict)

    @property
    def install_target(self) -> str:
        """Return the requirement handed to ``pip install`` when provisioning."""

        if self.dev_path is not None:
            return str(self.dev_path)
        return self.core_package or self.engine.distribution

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> BridgeConfig:
        """Build a configuration from environment variables.

        Args:
            environ: Environment mapping to read; defaults to ``os.environ``.
            **overrides: Field values taking precedence over the environment.

        Returns:
            BridgeConfig: Frozen configuration instance.

        Raises:
            ConfigError: If a switch holds an invalid value or the development
                path does not exist.
        """

        env = dict(os.environ if environ is None else environ)
        home = Path(env.get("HOME") or Path.home()).expanduser()
        xdg_cache = env.get(XDG_CACHE_ENV, "").strip()
        cache_base = Path(xdg_cache).expanduser() if xdg_cache else home / ".cache"

        dev_path: Path | None = None
        raw_dev_path = env.get(DEV_PATH_ENV, "").strip()
        if raw_dev_path:
            dev_path = Path(raw_dev_path).expanduser().resolve()
            if not dev_path.exists():
                raise ConfigError(f"{DEV_PATH_ENV} points to a missing path: {dev_path}")

        values: dict[str, object] = {
            "cache_root": cache_base / "rapidkit" / "bridge",
            "home": home,
            "force_venv": _flag(env, FORCE_VENV_ENV),
            "upgrade_pip": _flag(env, UPGRADE_PIP_ENV),
            "debug": _flag(env, DEBUG_ENV),
            "core_package": env.get(CORE_PACKAGE_ENV, "").strip() or None,
            "dev_path": dev_path,
            "env": env,
        }
        values.update(overrides)
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in _TRUTHY


__all__ = [
    "CORE_PACKAGE_ENV",
    "DEBUG_ENV",
    "DEFAULT_COMMANDS_TTL_MS",
    "DEFAULT_MODULES_TTL_MS",
    "DEV_PATH_ENV",
    "FORCE_VENV_ENV",
    "UPGRADE_PIP_ENV",
    "BridgeConfig",
    "ConfigError",
    "EngineSpec",
    "ProbeTimeouts",
]
