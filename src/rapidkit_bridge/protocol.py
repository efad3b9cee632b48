# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decode schema-versioned JSON emitted by the engine."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Final, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import BridgeError, BridgeErrorCode

SCHEMA_VERSION_KEY: Final[str] = "schema_version"
CURRENT_SCHEMA_VERSION: Final[int] = 1

PayloadT = TypeVar("PayloadT")
ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class DecodeResult(Generic[PayloadT]):
    """Either a decoded payload or the protocol failure that prevented it."""

    data: PayloadT | None = None
    error: BridgeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode(stdout: str, expected_schema_version: int = CURRENT_SCHEMA_VERSION) -> DecodeResult[dict[str, Any]]:
    """Parse ``stdout`` as a JSON object stamped with ``expected_schema_version``.

    Args:
        stdout: Raw engine output.
        expected_schema_version: The only ``schema_version`` accepted.

    Returns:
        DecodeResult[dict[str, Any]]: Payload on success; ``invalid-json`` for
        unparsable or non-object output; ``schema-mismatch`` when the version
        field is absent or different.
    """

    try:
        payload = json.loads(stdout)
    except (json.JSONDecodeError, TypeError) as exc:
        return DecodeResult(error=BridgeError(BridgeErrorCode.INVALID_JSON, str(exc)))
    if not isinstance(payload, dict):
        return DecodeResult(
            error=BridgeError(BridgeErrorCode.INVALID_JSON, f"expected a JSON object, got {type(payload).__name__}")
        )
    version = payload.get(SCHEMA_VERSION_KEY)
    if isinstance(version, bool) or version != expected_schema_version:
        return DecodeResult(
            error=BridgeError(
                BridgeErrorCode.SCHEMA_MISMATCH,
                f"expected {SCHEMA_VERSION_KEY}={expected_schema_version}, got {version!r}",
            )
        )
    return DecodeResult(data=payload)


def decode_model(
    stdout: str,
    expected_schema_version: int,
    model: type[ModelT],
) -> DecodeResult[ModelT]:
    """Decode ``stdout`` and validate the payload against ``model``.

    Returns:
        DecodeResult[ModelT]: Validated model, or an ``invalid-payload`` error
        when the call-site requirements are not met.
    """

    decoded = decode(stdout, expected_schema_version)
    if decoded.error is not None:
        return DecodeResult(error=decoded.error)
    try:
        return DecodeResult(data=model.model_validate(decoded.data))
    except ValidationError as exc:
        return DecodeResult(error=BridgeError(BridgeErrorCode.INVALID_PAYLOAD, str(exc)))


class EnginePayload(BaseModel):
    """Base for schema-versioned engine payloads; unknown keys are preserved."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    schema_version: int


class CoreVersionPayload(EnginePayload):
    version: str = Field(min_length=1)


class ProjectDetectPayload(EnginePayload):
    """Answer of ``project detect --path <p> --json``."""

    input: str | None = None
    confidence: Literal["strong", "weak", "none"] = "none"
    is_rapidkit_project: bool = Field(alias="isRapidkitProject")
    project_root: str | None = Field(default=None, alias="projectRoot")
    engine: str | None = None
    markers: dict[str, Any] | list[Any] | None = None


class CommandListPayload(EnginePayload):
    commands: list[str | dict[str, Any]]

    def names(self) -> list[str]:
        """Return the command names in engine order."""

        names: list[str] = []
        for entry in self.commands:
            name = entry.get("name") if isinstance(entry, dict) else entry
            if isinstance(name, str) and name.strip():
                names.append(name.strip())
        return names


__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "SCHEMA_VERSION_KEY",
    "CommandListPayload",
    "CoreVersionPayload",
    "DecodeResult",
    "EnginePayload",
    "ProjectDetectPayload",
    "decode",
    "decode_model",
]
