# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Engine discovery, provisioning and runtime resolution."""

from __future__ import annotations

from .constants import BridgeCacheLayout
from .models import ExecutionTarget, IsolatedEnvTarget, ProbeResult, ProbeStep, SystemTarget
from .probe import InterpreterProbe
from .provisioner import EnvironmentProvisioner
from .resolver import RuntimeResolver
from .strategies import DiscoveryStrategy, InstallationScanner, ScanContext, default_strategies
from .versioning import EngineVersionCheck, check_engine_version, same_engine_version

__all__ = [
    "BridgeCacheLayout",
    "DiscoveryStrategy",
    "EngineVersionCheck",
    "EnvironmentProvisioner",
    "ExecutionTarget",
    "InstallationScanner",
    "InterpreterProbe",
    "IsolatedEnvTarget",
    "ProbeResult",
    "ProbeStep",
    "RuntimeResolver",
    "ScanContext",
    "SystemTarget",
    "check_engine_version",
    "default_strategies",
    "same_engine_version",
]
