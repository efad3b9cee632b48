# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from rapidkit_bridge.config import BridgeConfig
from tests.helpers.runner import ScriptedRunner


@pytest.fixture
def config(tmp_path: Path) -> BridgeConfig:
    """Return a configuration rooted in a temporary cache and home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return BridgeConfig(cache_root=tmp_path / "cache" / "rapidkit" / "bridge", home=home)


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()

