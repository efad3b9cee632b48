# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime resolution and execution bridge for the RapidKit core engine."""

from __future__ import annotations

from .bridge import Bridge
from .config import BridgeConfig, ConfigError
from .errors import BridgeError, BridgeErrorCode, format_bridge_error
from .executor import CaptureResult

__version__ = "0.1.0"

__all__ = [
    "Bridge",
    "BridgeConfig",
    "BridgeError",
    "BridgeErrorCode",
    "CaptureResult",
    "ConfigError",
    "__version__",
    "format_bridge_error",
]
