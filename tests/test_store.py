# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for atomic JSON persistence."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from rapidkit_bridge.cache.store import JsonFileStore, epoch_ms


def test_write_then_read(tmp_path: Path) -> None:
    store = JsonFileStore()
    path = tmp_path / "nested" / "entry.json"

    store.write(path, {"schema_version": 1, "commands": ["create"]})

    assert store.read(path) == {"schema_version": 1, "commands": ["create"]}


def test_write_leaves_no_temporary_files(tmp_path: Path) -> None:
    store = JsonFileStore()
    path = tmp_path / "entry.json"

    store.write(path, {"a": 1})
    store.write(path, {"a": 2})

    assert sorted(item.name for item in tmp_path.iterdir()) == ["entry.json"]
    assert json.loads(path.read_text(encoding="utf-8")) == {"a": 2}


def test_missing_and_corrupt_files_read_as_none(tmp_path: Path) -> None:
    store = JsonFileStore()
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text('{"half": ', encoding="utf-8")

    assert store.read(tmp_path / "absent.json") is None
    assert store.read(corrupt) is None


def test_failed_replace_keeps_previous_content(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = JsonFileStore()
    path = tmp_path / "entry.json"
    store.write(path, {"version": 1})

    def broken_replace(src: str, dst: str) -> None:
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(os, "replace", broken_replace)

    assert store.try_write(path, {"version": 2}) is False
    assert store.read(path) == {"version": 1}
    assert sorted(item.name for item in tmp_path.iterdir()) == ["entry.json"]


def test_epoch_ms_is_milliseconds() -> None:
    assert epoch_ms() > 1_600_000_000_000
