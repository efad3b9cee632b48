# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Error taxonomy shared by the resolution, execution and protocol layers."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class BridgeErrorCode(StrEnum):
    """Machine-readable codes attached to :class:`BridgeError`."""

    ENGINE_NOT_FOUND = "engine-not-found"
    VENV_CREATE_FAILED = "venv-create-failed"
    INVALID_JSON = "invalid-json"
    SCHEMA_MISMATCH = "schema-mismatch"
    INVALID_PAYLOAD = "invalid-payload"
    ENGINE_FAILED = "engine-failed"


class BridgeError(RuntimeError):
    """Raised when the engine cannot be resolved, provisioned or understood."""

    def __init__(self, code: BridgeErrorCode, detail: str = "") -> None:
        """Initialise the error with a code and human-readable detail.

        Args:
            code: Machine-readable failure category.
            detail: Captured subprocess output or a short explanation.
        """

        message = f"{code.value}: {detail}" if detail else code.value
        super().__init__(message)
        self.code = code
        self.detail = detail


_HINTS: Final[dict[BridgeErrorCode, str]] = {
    BridgeErrorCode.ENGINE_NOT_FOUND: (
        "could not find Python (python3/python) on PATH. Install Python 3.10+ and make sure it is on PATH."
    ),
    BridgeErrorCode.VENV_CREATE_FAILED: (
        "failed to bootstrap the isolated engine environment. Check that the 'venv' module is available "
        "and that the package index (or RAPIDKIT_DEV_PATH) is reachable."
    ),
    BridgeErrorCode.INVALID_JSON: "the engine returned output that is not valid JSON.",
    BridgeErrorCode.SCHEMA_MISMATCH: "the engine speaks an unsupported protocol version; upgrade rapidkit-core.",
    BridgeErrorCode.INVALID_PAYLOAD: "the engine returned JSON with an unexpected shape.",
    BridgeErrorCode.ENGINE_FAILED: "the engine exited with a non-zero status.",
}


def format_bridge_error(error: BridgeError) -> str:
    """Return a user-facing message for ``error``.

    Args:
        error: Bridge failure raised or returned by a component.

    Returns:
        str: Message combining the error hint with the captured detail.
    """

    hint = _HINTS.get(error.code, error.code.value)
    lines = [f"RapidKit bridge: {hint}"]
    detail = error.detail.strip()
    if detail:
        lines.append(f"Details: {detail}")
    return "\n".join(lines)


__all__ = ["BridgeError", "BridgeErrorCode", "format_bridge_error"]
