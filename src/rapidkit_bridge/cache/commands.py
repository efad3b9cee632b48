# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cache of the top-level commands the engine understands."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import BridgeConfig
from ..environment.constants import BridgeCacheLayout
from ..environment.versioning import same_engine_version
from ..executor import CommandExecutor
from ..protocol import CURRENT_SCHEMA_VERSION, CommandListPayload, CoreVersionPayload, decode_model
from .bootstrap import BOOTSTRAP_CORE_COMMANDS
from .help_parser import parse_commands_from_help
from .store import Clock, JsonFileStore, epoch_ms

LOGGER = logging.getLogger(__name__)


class CommandSetCacheEntry(BaseModel):
    """Persisted command discovery result."""

    model_config = ConfigDict(extra="ignore")

    schema_version: int = CURRENT_SCHEMA_VERSION
    fetched_at: int
    engine_version: str | None = None
    commands: list[str] = Field(min_length=1)

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        age = now_ms - self.fetched_at
        return 0 <= age < ttl_ms


class CommandSetCache:
    """Serve engine command names from disk, refreshing them when expired.

    Lookup order for :meth:`get_or_fetch`: a fresh entry recorded for the
    running engine version, the engine's ``commands --json`` answer, names
    parsed from ``--help``, the stale entry, and finally a built-in bootstrap
    set. The result is never empty.
    """

    def __init__(
        self,
        config: BridgeConfig,
        executor: CommandExecutor,
        *,
        store: JsonFileStore | None = None,
        clock: Clock = epoch_ms,
    ) -> None:
        self._config = config
        self._executor = executor
        self._store = store or JsonFileStore()
        self._clock = clock
        self._path = BridgeCacheLayout(config.cache_root).commands_cache
        self._memory: CommandSetCacheEntry | None = None

    def load_entry(self) -> CommandSetCacheEntry | None:
        """Return the persisted entry regardless of age, or ``None`` when absent or malformed."""

        if self._memory is not None:
            return self._memory
        payload = self._store.read(self._path)
        if payload is None:
            return None
        try:
            entry = CommandSetCacheEntry.model_validate(payload)
        except ValidationError:
            LOGGER.debug("ignoring malformed command cache %s", self._path)
            return None
        if entry.schema_version != CURRENT_SCHEMA_VERSION:
            return None
        self._memory = entry
        return entry

    def get_cached(self, ttl_ms: int | None = None) -> set[str] | None:
        """Return cached commands when a fresh entry exists; never spawns a process.

        Args:
            ttl_ms: Maximum entry age; defaults to the configured command TTL.

        Returns:
            set[str] | None: Cached command names, or ``None`` when absent or expired.
        """

        ttl = ttl_ms if ttl_ms is not None else self._config.commands_ttl_ms
        entry = self.load_entry()
        if entry is None or not entry.is_fresh(self._clock(), ttl):
            return None
        return set(entry.commands)

    def get_or_fetch(self, ttl_ms: int | None = None, *, refresh: bool = False) -> set[str]:
        """Return the engine command set, refreshing it when expired.

        A fresh entry that recorded an engine version is only served while the
        engine still reports that version; an upgraded engine forces discovery.

        Args:
            ttl_ms: Maximum entry age; defaults to the configured command TTL.
            refresh: Skip the freshness check and always try discovery first.

        Returns:
            set[str]: Non-empty set of command names.
        """

        current_version: str | None = None
        if not refresh:
            cached = self.get_cached(ttl_ms)
            entry = self.load_entry()
            if cached and entry is not None:
                if entry.engine_version is None:
                    return cached
                current_version = self._engine_version()
                if current_version is None or same_engine_version(entry.engine_version, current_version):
                    return cached
                LOGGER.debug(
                    "engine version changed from %s to %s; refreshing command cache",
                    entry.engine_version,
                    current_version,
                )

        discovered = self._discover(current_version)
        if discovered is not None:
            self._store.try_write(self._path, discovered.model_dump())
            self._memory = discovered
            return set(discovered.commands)

        stale = self.load_entry()
        if stale is not None:
            LOGGER.debug("command discovery failed; serving stale cache from %s", stale.fetched_at)
            return set(stale.commands)
        LOGGER.debug("command discovery failed; using bootstrap command set")
        return set(BOOTSTRAP_CORE_COMMANDS)

    def _discover(self, current_version: str | None) -> CommandSetCacheEntry | None:
        timeout = self._config.timeouts.discovery
        names: set[str] = set()
        structured = self._executor.capture(["commands", "--json"], timeout=timeout)
        if structured.exit_code == 0:
            decoded = decode_model(structured.stdout, CURRENT_SCHEMA_VERSION, CommandListPayload)
            if decoded.data is not None:
                names = set(decoded.data.names())
                extra = decoded.data.model_extra or {}
                reported = extra.get("version") or extra.get("rapidkit_version")
                if isinstance(reported, str):
                    current_version = reported
            else:
                LOGGER.debug("structured command list rejected: %s", decoded.error)

        if not names:
            help_output = self._executor.capture(["--help"], timeout=timeout)
            if help_output.exit_code == 0:
                names = parse_commands_from_help(help_output.stdout, program=self._config.engine.script)
        if not names:
            return None
        return CommandSetCacheEntry(
            fetched_at=self._clock(),
            engine_version=current_version or self._engine_version(),
            commands=sorted(names),
        )

    def _engine_version(self) -> str | None:
        result = self._executor.capture(["--version", "--json"], timeout=self._config.timeouts.engine_call)
        if result.exit_code != 0:
            return None
        decoded = decode_model(result.stdout, CURRENT_SCHEMA_VERSION, CoreVersionPayload)
        return decoded.data.version if decoded.data is not None else None


__all__ = ["CommandSetCache", "CommandSetCacheEntry"]
