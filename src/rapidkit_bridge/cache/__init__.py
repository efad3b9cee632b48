# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Time-bounded caches for engine command and module discovery."""

from __future__ import annotations

from .store import Clock, JsonFileStore, epoch_ms

__all__ = ["Clock", "JsonFileStore", "epoch_ms"]
