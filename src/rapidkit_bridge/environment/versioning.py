# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Interpret the engine version reported by ``--version --json``."""

from __future__ import annotations

from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

from ..protocol import CoreVersionPayload


def parse_engine_version(raw: str | None) -> Version | None:
    """Return ``raw`` as a PEP 440 version, tolerating a leading ``v``.

    Args:
        raw: Version text reported by the engine or configured as a minimum.

    Returns:
        Version | None: Parsed version, or ``None`` when ``raw`` is empty or invalid.
    """

    if not raw:
        return None
    try:
        return Version(raw.strip().removeprefix("v"))
    except InvalidVersion:
        return None


@dataclass(frozen=True, slots=True)
class EngineVersionCheck:
    """Reported engine version compared against the minimum the bridge supports."""

    reported: str
    minimum: str
    parsed: Version | None

    @property
    def compatible(self) -> bool:
        floor = parse_engine_version(self.minimum)
        if floor is None:
            return True
        return self.parsed is not None and self.parsed >= floor

    def describe(self) -> str:
        return f"{self.reported} (minimum {self.minimum})"


def check_engine_version(payload: CoreVersionPayload, minimum: str) -> EngineVersionCheck:
    """Compare the version in ``payload`` with ``minimum``."""

    return EngineVersionCheck(
        reported=payload.version,
        minimum=minimum,
        parsed=parse_engine_version(payload.version),
    )


def same_engine_version(first: str, second: str) -> bool:
    """Return whether two reported versions name the same engine release.

    Versions that do not parse are compared as plain text.
    """

    left, right = parse_engine_version(first), parse_engine_version(second)
    if left is None or right is None:
        return first.strip() == second.strip()
    return left == right


__all__ = ["EngineVersionCheck", "check_engine_version", "parse_engine_version", "same_engine_version"]
