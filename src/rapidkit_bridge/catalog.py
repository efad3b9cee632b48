# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Normalised view over the raw module objects returned by the engine."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

Framework = Literal["fastapi", "nestjs", "both"]

DEFAULT_CATEGORY: Final[str] = "infrastructure"
CATEGORY_ALIASES: Final[dict[str, str]] = {
    "auth": "auth",
    "authentication": "auth",
    "database": "database",
    "payment": "payment",
    "billing": "payment",
    "communication": "communication",
    "infrastructure": "infrastructure",
    "security": "security",
    "analytics": "analytics",
}
_SLUG_SEPARATORS: Final[re.Pattern[str]] = re.compile(r"[\s_]+")


class ModuleDescriptor(BaseModel):
    """One add-on module with consistent field names.

    ``dependencies`` are free-form identifiers; entries that do not resolve
    to another descriptor in the same snapshot are kept as-is.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str = DEFAULT_CATEGORY
    description: str = ""
    long_description: str = ""
    keywords: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    use_cases: tuple[str, ...] = ()
    framework: Framework = "both"

    @classmethod
    def from_engine(cls, raw: Mapping[str, Any]) -> ModuleDescriptor | None:
        """Build a descriptor from an engine module object.

        Args:
            raw: Module object as found in a catalog entry.

        Returns:
            ModuleDescriptor | None: Descriptor, or ``None`` when the object has
            neither an identifier nor a name.
        """

        name = _first_str(raw, "display_name", "name")
        slug_source = _first_str(raw, "id", "module_id", "name")
        identifier = _slugify(slug_source) if slug_source else None
        if not identifier or not name:
            return None
        description = _first_str(raw, "description", "summary") or ""
        return cls(
            id=identifier,
            name=name,
            category=normalize_category(_first_str(raw, "category")),
            description=description,
            long_description=_first_str(raw, "long_description", "description") or description,
            keywords=_str_list(raw.get("keywords") or raw.get("tags")),
            dependencies=_str_list(raw.get("dependencies")),
            use_cases=_str_list(raw.get("use_cases") or raw.get("useCases")),
            framework=normalize_framework(raw.get("framework") or raw.get("frameworks")),
        )


def normalize_category(raw: str | None) -> str:
    """Map engine category labels onto the known category set."""

    if not raw:
        return DEFAULT_CATEGORY
    return CATEGORY_ALIASES.get(raw.strip().lower(), DEFAULT_CATEGORY)


def normalize_framework(raw: object) -> Framework:
    """Return the framework a module targets, ``both`` when unspecified or mixed."""

    values = [raw] if isinstance(raw, str) else list(raw) if isinstance(raw, (list, tuple)) else []
    lowered = " ".join(str(value).lower() for value in values)
    has_fastapi = "fastapi" in lowered
    has_nest = "nest" in lowered
    if has_fastapi and not has_nest:
        return "fastapi"
    if has_nest and not has_fastapi:
        return "nestjs"
    return "both"


class ModuleCatalog:
    """Query helpers over one catalog snapshot, in engine order."""

    def __init__(self, modules: Iterable[Any]) -> None:
        descriptors: list[ModuleDescriptor] = []
        seen: set[str] = set()
        for raw in modules:
            if not isinstance(raw, Mapping):
                continue
            descriptor = ModuleDescriptor.from_engine(raw)
            if descriptor is None or descriptor.id in seen:
                continue
            seen.add(descriptor.id)
            descriptors.append(descriptor)
        self._descriptors = tuple(descriptors)
        self._by_id = {descriptor.id: descriptor for descriptor in descriptors}

    def descriptors(self) -> tuple[ModuleDescriptor, ...]:
        return self._descriptors

    def by_id(self, module_id: str) -> ModuleDescriptor | None:
        return self._by_id.get(module_id) or self._by_id.get(_slugify(module_id))

    def by_category(self, category: str) -> list[ModuleDescriptor]:
        wanted = normalize_category(category)
        return [descriptor for descriptor in self._descriptors if descriptor.category == wanted]

    def search(self, query: str) -> list[ModuleDescriptor]:
        """Return descriptors whose name, description, keywords or id mention ``query``."""

        needle = query.strip().lower()
        if not needle:
            return list(self._descriptors)
        matches: list[ModuleDescriptor] = []
        for descriptor in self._descriptors:
            haystack = " ".join(
                (descriptor.id, descriptor.name, descriptor.description, *descriptor.keywords)
            ).lower()
            if needle in haystack:
                matches.append(descriptor)
        return matches

    def unresolved_dependencies(self) -> dict[str, list[str]]:
        """Return dependency ids that name no descriptor in this snapshot, keyed by module id."""

        missing: dict[str, list[str]] = {}
        for descriptor in self._descriptors:
            unknown = [dep for dep in descriptor.dependencies if dep not in self._by_id]
            if unknown:
                missing[descriptor.id] = unknown
        return missing


def _first_str(raw: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _str_list(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    if isinstance(value, Sequence):
        return tuple(str(item) for item in value if isinstance(item, (str, int)) and str(item).strip())
    return ()


def _slugify(value: str) -> str:
    return _SLUG_SEPARATORS.sub("-", value.strip().lower())


__all__ = [
    "CATEGORY_ALIASES",
    "Framework",
    "ModuleCatalog",
    "ModuleDescriptor",
    "normalize_category",
    "normalize_framework",
]
