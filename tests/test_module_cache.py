# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the per-filter module catalog cache."""

from __future__ import annotations

import json
from typing import Any

from rapidkit_bridge.cache.modules import CatalogFilters, ModuleCatalogCache
from rapidkit_bridge.config import BridgeConfig
from tests.helpers.runner import FakeExecutor

NOW = 1_700_000_000_000
MINUTE = 60 * 1000
PRIMARY = ["modules", "list", "--json-schema", "1"]
LEGACY = ["modules", "list", "--json"]


def _module(name: str) -> dict[str, Any]:
    return {"id": name, "name": name.title(), "category": "auth", "version": "1.0.0"}


def _envelope(*names: str) -> str:
    return json.dumps(
        {
            "schema_version": 1,
            "generated_at": "2025-01-01T00:00:00Z",
            "filters": {"category": None, "tag": None, "detailed": False},
            "stats": {"total": len(names)},
            "modules": [_module(name) for name in names],
        }
    )


def _cache(config: BridgeConfig, executor: FakeExecutor, now: int = NOW) -> ModuleCatalogCache:
    return ModuleCatalogCache(config, executor, clock=lambda: now)  # type: ignore[arg-type]


def _seed(
    cache: ModuleCatalogCache,
    modules: list[Any],
    fetched_at: int,
    filters: CatalogFilters | None = None,
) -> None:
    path = cache.cache_path(filters)
    path.parent.mkdir(parents=True, exist_ok=True)
    entry = {"schema_version": 1, "fetched_at": fetched_at, "source": "native", "modules": modules}
    path.write_text(json.dumps(entry), encoding="utf-8")


def test_fresh_entry_is_returned_without_spawning(config: BridgeConfig) -> None:
    executor = FakeExecutor()
    cache = _cache(config, executor)
    _seed(cache, [_module("auth"), _module("redis")], NOW - 5 * MINUTE)

    entry = cache.get_modules_catalog()

    assert entry is not None
    assert len(entry.modules) == 2
    assert executor.calls == []


def test_expired_entry_is_refetched_and_overwritten(config: BridgeConfig) -> None:
    executor = FakeExecutor().reply(PRIMARY, stdout=_envelope("auth", "redis", "celery"))
    cache = _cache(config, executor)
    _seed(cache, [_module("auth"), _module("redis")], NOW - 60 * MINUTE)

    entry = cache.get_modules_catalog(ttl_ms=30 * MINUTE)

    assert entry is not None
    assert len(entry.modules) == 3
    assert entry.fetched_at == NOW
    assert entry.stats == {"total": 3}
    stored = json.loads(cache.cache_path().read_text(encoding="utf-8"))
    assert stored["fetched_at"] == NOW
    assert len(stored["modules"]) == 3


def test_returns_none_when_every_fetch_fails_and_nothing_is_cached(config: BridgeConfig) -> None:
    executor = FakeExecutor().reply(["modules"], exit_code=1, stderr="boom")

    assert _cache(config, executor).get_modules_catalog() is None
    assert executor.calls == [PRIMARY, LEGACY]


def test_stale_entry_is_returned_unchanged_when_fetch_fails(config: BridgeConfig) -> None:
    executor = FakeExecutor()
    cache = _cache(config, executor)
    stale_modules = [_module("auth"), {"id": "custom", "extra": [1, 2, 3]}]
    _seed(cache, stale_modules, NOW - 120 * MINUTE)

    entry = cache.get_modules_catalog()

    assert entry is not None
    assert entry.modules == stale_modules
    assert entry.fetched_at == NOW - 120 * MINUTE


def test_legacy_listing_is_wrapped(config: BridgeConfig) -> None:
    legacy_modules = [_module(name) for name in ("auth", "redis", "celery", "stripe")]
    executor = (
        FakeExecutor()
        .reply(PRIMARY, exit_code=2, stderr="No such option: --json-schema")
        .reply(LEGACY, stdout=json.dumps(legacy_modules))
    )

    entry = _cache(config, executor).get_modules_catalog()

    assert entry is not None
    assert entry.source == "legacy-json"
    assert entry.modules == legacy_modules
    assert len(entry.modules) == 4


def test_primary_with_wrong_schema_falls_back_to_legacy(config: BridgeConfig) -> None:
    executor = (
        FakeExecutor()
        .reply(PRIMARY, stdout=json.dumps({"schema_version": 2, "modules": []}))
        .reply(LEGACY, stdout=json.dumps([_module("auth")]))
    )

    entry = _cache(config, executor).get_modules_catalog()

    assert entry is not None and entry.source == "legacy-json"


def test_legacy_envelope_is_accepted(config: BridgeConfig) -> None:
    executor = FakeExecutor().reply(PRIMARY, exit_code=2).reply(LEGACY, stdout=_envelope("auth"))

    entry = _cache(config, executor).get_modules_catalog()

    assert entry is not None
    assert entry.source == "native"
    assert entry.generated_at == "2025-01-01T00:00:00Z"


def test_filters_are_forwarded_and_cached_separately(config: BridgeConfig) -> None:
    filters = CatalogFilters(category="database", detailed=True)
    executor = FakeExecutor().reply(PRIMARY, stdout=_envelope("postgres"))
    cache = _cache(config, executor)
    _seed(cache, [_module("auth")], NOW)

    filtered = cache.get_modules_catalog(filters)
    default = cache.get_modules_catalog()

    assert filtered is not None and default is not None
    assert executor.calls == [[*PRIMARY, "--category", "database", "--detailed"]]
    assert [module["id"] for module in filtered.modules] == ["postgres"]
    assert [module["id"] for module in default.modules] == ["auth"]
    assert cache.cache_path(filters) != cache.cache_path()
    assert cache.cache_path(filters).exists()


def test_filter_cache_keys() -> None:
    assert CatalogFilters().cache_key() == "default"
    first = CatalogFilters(category="auth").cache_key()
    assert first == CatalogFilters(category="auth").cache_key()
    assert first != CatalogFilters(tag="auth").cache_key()
    assert len(first) == 16


def test_refresh_forces_live_fetch(config: BridgeConfig) -> None:
    executor = FakeExecutor().reply(PRIMARY, stdout=_envelope("auth", "redis"))
    cache = _cache(config, executor)
    _seed(cache, [_module("auth")], NOW)

    entry = cache.get_modules_catalog(refresh=True)

    assert entry is not None and len(entry.modules) == 2
    assert executor.calls == [PRIMARY]


def test_corrupt_cache_file_counts_as_absent(config: BridgeConfig) -> None:
    cache = _cache(config, FakeExecutor())
    path = cache.cache_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("[", encoding="utf-8")

    assert cache.get_modules_catalog() is None
