# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Composition root wiring the bridge components for one process."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .cache.commands import CommandSetCache
from .cache.modules import ModuleCatalogCache
from .cache.store import Clock, JsonFileStore, epoch_ms
from .config import BridgeConfig
from .engine import EngineClient
from .environment.probe import InterpreterProbe
from .environment.provisioner import EnvironmentProvisioner
from .environment.resolver import RuntimeResolver
from .environment.strategies import DiscoveryStrategy, InstallationScanner, ScanContext
from .executor import CommandExecutor
from .process_utils import CommandRunner, run_command


@dataclass(frozen=True, slots=True)
class Bridge:
    """All bridge services sharing one configuration, runner and clock."""

    config: BridgeConfig
    probe: InterpreterProbe
    scanner: InstallationScanner
    provisioner: EnvironmentProvisioner
    resolver: RuntimeResolver
    executor: CommandExecutor
    engine: EngineClient
    commands: CommandSetCache
    modules: ModuleCatalogCache

    @classmethod
    def create(
        cls,
        config: BridgeConfig,
        *,
        runner: CommandRunner = run_command,
        which: Callable[[str], str | None] | None = None,
        clock: Clock = epoch_ms,
        cwd: Path | None = None,
        strategies: Sequence[DiscoveryStrategy] | None = None,
    ) -> Bridge:
        """Construct every component; call once per process.

        Args:
            config: Configuration built at startup.
            runner: Subprocess runner shared by all components.
            which: ``PATH`` lookup; defaults to ``shutil.which`` over the configured ``PATH``.
            clock: Epoch-millisecond clock used by the caches.
            cwd: Working directory for project-scoped discovery tools.
            strategies: Discovery strategies overriding the default order.

        Returns:
            Bridge: Wired bridge services.
        """

        lookup = which or _path_lookup(config)
        store = JsonFileStore()
        probe = InterpreterProbe(config, runner=runner)
        context = ScanContext(
            config=config,
            probe=probe,
            runner=runner,
            which=lookup,
            cwd=cwd or Path.cwd(),
        )
        scanner = InstallationScanner(context, strategies)
        provisioner = EnvironmentProvisioner(config, probe=probe, runner=runner, store=store)
        resolver = RuntimeResolver(config, scanner=scanner, provisioner=provisioner, probe=probe, which=lookup)
        executor = CommandExecutor(config, resolver, runner=runner)
        return cls(
            config=config,
            probe=probe,
            scanner=scanner,
            provisioner=provisioner,
            resolver=resolver,
            executor=executor,
            engine=EngineClient(config, executor),
            commands=CommandSetCache(config, executor, store=store, clock=clock),
            modules=ModuleCatalogCache(config, executor, store=store, clock=clock),
        )


def _path_lookup(config: BridgeConfig) -> Callable[[str], str | None]:
    search_path = config.env.get("PATH")

    def lookup(name: str) -> str | None:
        return shutil.which(name, path=search_path)

    return lookup


__all__ = ["Bridge"]
