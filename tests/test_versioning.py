# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for engine version interpretation."""

from __future__ import annotations

import pytest
from packaging.version import Version

from rapidkit_bridge.environment.versioning import (
    check_engine_version,
    parse_engine_version,
    same_engine_version,
)
from rapidkit_bridge.protocol import CoreVersionPayload


def _payload(version: str) -> CoreVersionPayload:
    return CoreVersionPayload(schema_version=1, version=version)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("0.2.0", Version("0.2.0")),
        ("v1.4.0rc1", Version("1.4.0rc1")),
        (" 0.3.1\n", Version("0.3.1")),
        ("nightly", None),
        (None, None),
    ],
)
def test_parse_engine_version(raw: str | None, expected: Version | None) -> None:
    assert parse_engine_version(raw) == expected


def test_check_engine_version_against_minimum() -> None:
    current = check_engine_version(_payload("0.2.1"), "0.2.0")
    outdated = check_engine_version(_payload("0.1.9"), "0.2.0")
    unparsable = check_engine_version(_payload("nightly"), "0.2.0")

    assert current.compatible
    assert current.describe() == "0.2.1 (minimum 0.2.0)"
    assert not outdated.compatible
    assert not unparsable.compatible


def test_invalid_minimum_accepts_any_engine() -> None:
    assert check_engine_version(_payload("0.0.1"), "unreleased").compatible


def test_same_engine_version() -> None:
    assert same_engine_version("0.2.0", "v0.2")
    assert not same_engine_version("0.2.0", "0.3.0")
    assert same_engine_version("nightly", "nightly ")
    assert not same_engine_version("nightly", "0.2.0")
