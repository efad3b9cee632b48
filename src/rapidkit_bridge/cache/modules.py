# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cache of the engine's add-on module catalog, one file per filter set."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from ..config import BridgeConfig
from ..environment.constants import BridgeCacheLayout
from ..executor import CommandExecutor
from ..protocol import CURRENT_SCHEMA_VERSION, decode
from .store import Clock, JsonFileStore, epoch_ms

LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_KEY: Final[str] = "default"
CatalogSource = Literal["native", "legacy-json"]


class CatalogFilters(BaseModel):
    """Filters forwarded to ``modules list``; never applied client-side."""

    model_config = ConfigDict(frozen=True)

    category: str | None = None
    tag: str | None = None
    detailed: bool = False

    @property
    def is_default(self) -> bool:
        return self.category is None and self.tag is None and not self.detailed

    def cache_key(self) -> str:
        """Return the cache file key identifying this filter combination."""

        if self.is_default:
            return DEFAULT_CACHE_KEY
        canonical = json.dumps(self.model_dump(), sort_keys=True)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]

    def to_args(self) -> list[str]:
        args: list[str] = []
        if self.category:
            args.extend(["--category", self.category])
        if self.tag:
            args.extend(["--tag", self.tag])
        if self.detailed:
            args.append("--detailed")
        return args


class ModuleCatalogCacheEntry(BaseModel):
    """Persisted module catalog snapshot; module objects are kept as returned."""

    model_config = ConfigDict(extra="allow")

    schema_version: int = CURRENT_SCHEMA_VERSION
    fetched_at: int
    source: CatalogSource = "native"
    generated_at: str | None = None
    filters: dict[str, Any] | None = None
    stats: dict[str, Any] | None = None
    modules: list[Any]

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        age = now_ms - self.fetched_at
        return 0 <= age < ttl_ms


class ModuleCatalogCache:
    """Serve module catalogs from disk, refreshing them when expired.

    A live fetch tries ``modules list --json-schema 1`` and then the legacy
    ``modules list --json`` form. When both fail the stale entry for the same
    filters is returned, and ``None`` only when there is none.
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
        self._layout = BridgeCacheLayout(config.cache_root)
        self._memory: dict[str, ModuleCatalogCacheEntry] = {}

    def cache_path(self, filters: CatalogFilters | None = None) -> Path:
        """Return the cache file used for ``filters``."""

        return self._layout.modules_cache((filters or CatalogFilters()).cache_key())

    def load_entry(self, filters: CatalogFilters | None = None) -> ModuleCatalogCacheEntry | None:
        """Return the persisted entry for ``filters`` regardless of age."""

        key = (filters or CatalogFilters()).cache_key()
        if key in self._memory:
            return self._memory[key]
        payload = self._store.read(self._layout.modules_cache(key))
        if not isinstance(payload, dict):
            return None
        try:
            entry = ModuleCatalogCacheEntry.model_validate(payload)
        except ValidationError:
            LOGGER.debug("ignoring malformed module catalog cache for key %s", key)
            return None
        if entry.schema_version != CURRENT_SCHEMA_VERSION:
            return None
        self._memory[key] = entry
        return entry

    def get_modules_catalog(
        self,
        filters: CatalogFilters | None = None,
        ttl_ms: int | None = None,
        *,
        refresh: bool = False,
    ) -> ModuleCatalogCacheEntry | None:
        """Return the module catalog for ``filters``.

        Args:
            filters: Filters forwarded to the engine; part of the cache key.
            ttl_ms: Maximum entry age; defaults to the configured catalog TTL.
            refresh: Skip the freshness check and always try a live fetch first.

        Returns:
            ModuleCatalogCacheEntry | None: Fresh, refetched or stale catalog;
            ``None`` when nothing usable exists.
        """

        active = filters or CatalogFilters()
        ttl = ttl_ms if ttl_ms is not None else self._config.modules_ttl_ms
        cached = self.load_entry(active)
        if cached is not None and not refresh and cached.is_fresh(self._clock(), ttl):
            return cached

        fetched = self._fetch(active)
        if fetched is not None:
            key = active.cache_key()
            self._store.try_write(self._layout.modules_cache(key), fetched.model_dump())
            self._memory[key] = fetched
            return fetched

        if cached is not None:
            LOGGER.debug("module catalog fetch failed; serving stale cache")
        return cached

    def _fetch(self, filters: CatalogFilters) -> ModuleCatalogCacheEntry | None:
        timeout = self._config.timeouts.discovery
        filter_args = filters.to_args()

        primary = self._executor.capture(
            ["modules", "list", "--json-schema", str(CURRENT_SCHEMA_VERSION), *filter_args],
            timeout=timeout,
        )
        if primary.exit_code == 0:
            decoded = decode(primary.stdout, CURRENT_SCHEMA_VERSION)
            if decoded.data is not None:
                entry = self._from_envelope(decoded.data, source="native")
                if entry is not None:
                    return entry
            else:
                LOGGER.debug("module catalog rejected: %s", decoded.error)

        legacy = self._executor.capture(["modules", "list", "--json", *filter_args], timeout=timeout)
        if legacy.exit_code != 0:
            return None
        try:
            payload = json.loads(legacy.stdout)
        except json.JSONDecodeError:
            return None
        if isinstance(payload, list):
            return ModuleCatalogCacheEntry(
                schema_version=CURRENT_SCHEMA_VERSION,
                fetched_at=self._clock(),
                source="legacy-json",
                filters=filters.model_dump(),
                modules=payload,
            )
        if isinstance(payload, dict) and payload.get("schema_version") == CURRENT_SCHEMA_VERSION:
            return self._from_envelope(payload, source="native")
        return None

    def _from_envelope(self, payload: dict[str, Any], *, source: CatalogSource) -> ModuleCatalogCacheEntry | None:
        modules = payload.get("modules")
        if not isinstance(modules, list):
            return None
        generated_at = payload.get("generated_at")
        filters = payload.get("filters")
        stats = payload.get("stats")
        return ModuleCatalogCacheEntry(
            schema_version=CURRENT_SCHEMA_VERSION,
            fetched_at=self._clock(),
            source=source,
            generated_at=generated_at if isinstance(generated_at, str) else None,
            filters=filters if isinstance(filters, dict) else None,
            stats=stats if isinstance(stats, dict) else None,
            modules=modules,
        )


__all__ = ["CatalogFilters", "ModuleCatalogCache", "ModuleCatalogCacheEntry"]
