# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for normalised module catalog views."""

from __future__ import annotations

import pytest

from rapidkit_bridge.catalog import ModuleCatalog, ModuleDescriptor, normalize_category, normalize_framework

RAW_MODULES = [
    {
        "id": "auth_core",
        "display_name": "Auth Core",
        "category": "Authentication",
        "description": "Password hashing and tokens.",
        "tags": ["jwt", "security"],
        "dependencies": ["settings"],
        "frameworks": ["fastapi"],
    },
    {
        "module_id": "redis cache",
        "name": "Redis Cache",
        "category": "database",
        "summary": "Redis client and cache helpers.",
        "useCases": ["caching"],
        "framework": "nestjs",
    },
    {"name": "Settings", "category": "unknown-category"},
    {"description": "no identifier at all"},
    "not-a-mapping",
    {"id": "auth_core", "name": "Duplicate"},
]


@pytest.fixture
def catalog() -> ModuleCatalog:
    return ModuleCatalog(RAW_MODULES)


def test_descriptors_are_normalised_in_engine_order(catalog: ModuleCatalog) -> None:
    ids = [descriptor.id for descriptor in catalog.descriptors()]

    assert ids == ["auth-core", "redis-cache", "settings"]


def test_descriptor_fields_are_mapped(catalog: ModuleCatalog) -> None:
    auth = catalog.by_id("auth-core")

    assert auth == ModuleDescriptor(
        id="auth-core",
        name="Auth Core",
        category="auth",
        description="Password hashing and tokens.",
        long_description="Password hashing and tokens.",
        keywords=("jwt", "security"),
        dependencies=("settings",),
        framework="fastapi",
    )


def test_lookup_accepts_raw_identifiers(catalog: ModuleCatalog) -> None:
    assert catalog.by_id("redis cache") is not None
    assert catalog.by_id("missing") is None


def test_unknown_category_falls_back(catalog: ModuleCatalog) -> None:
    settings = catalog.by_id("settings")

    assert settings is not None
    assert settings.category == "infrastructure"
    assert settings.framework == "both"


def test_by_category_uses_aliases(catalog: ModuleCatalog) -> None:
    assert [descriptor.id for descriptor in catalog.by_category("authentication")] == ["auth-core"]


def test_search_matches_keywords_and_descriptions(catalog: ModuleCatalog) -> None:
    assert [descriptor.id for descriptor in catalog.search("JWT")] == ["auth-core"]
    assert [descriptor.id for descriptor in catalog.search("cache")] == ["redis-cache"]
    assert len(catalog.search("  ")) == 3


def test_unresolved_dependencies_are_reported_not_dropped() -> None:
    catalog = ModuleCatalog(
        [
            {"id": "api", "name": "API", "dependencies": ["auth", "ghost"]},
            {"id": "auth", "name": "Auth"},
        ]
    )

    assert catalog.unresolved_dependencies() == {"api": ["ghost"]}
    api = catalog.by_id("api")
    assert api is not None and api.dependencies == ("auth", "ghost")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, "infrastructure"), ("Billing", "payment"), (" security ", "security"), ("gpu", "infrastructure")],
)
def test_normalize_category(raw: str | None, expected: str) -> None:
    assert normalize_category(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("fastapi", "fastapi"), (["NestJS"], "nestjs"), (["fastapi", "nestjs"], "both"), (None, "both")],
)
def test_normalize_framework(raw: object, expected: str) -> None:
    assert normalize_framework(raw) == expected
