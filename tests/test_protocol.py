# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for decoding schema-versioned engine JSON."""

from __future__ import annotations

import pytest

from rapidkit_bridge.errors import BridgeErrorCode
from rapidkit_bridge.protocol import (
    CommandListPayload,
    CoreVersionPayload,
    ProjectDetectPayload,
    decode,
    decode_model,
)


def test_decode_accepts_matching_schema_version() -> None:
    result = decode('{"schema_version": 1, "version": "0.2.0"}', 1)

    assert result.ok
    assert result.data == {"schema_version": 1, "version": "0.2.0"}


@pytest.mark.parametrize("stdout", ["", "not json", "{'schema_version': 1}", '{"schema_version": 1'])
def test_decode_rejects_unparsable_output(stdout: str) -> None:
    result = decode(stdout)

    assert not result.ok
    assert result.data is None
    assert result.error is not None
    assert result.error.code is BridgeErrorCode.INVALID_JSON


@pytest.mark.parametrize("stdout", ["[1, 2]", '"text"', "42", "null"])
def test_decode_rejects_non_object_payloads(stdout: str) -> None:
    result = decode(stdout)

    assert result.error is not None
    assert result.error.code is BridgeErrorCode.INVALID_JSON


@pytest.mark.parametrize(
    "stdout",
    [
        '{"version": "0.2.0"}',
        '{"schema_version": 2, "version": "0.2.0"}',
        '{"schema_version": "1"}',
        '{"schema_version": true}',
    ],
)
def test_decode_rejects_missing_or_different_schema_version(stdout: str) -> None:
    result = decode(stdout, 1)

    assert result.error is not None
    assert result.error.code is BridgeErrorCode.SCHEMA_MISMATCH


def test_decode_honours_expected_version() -> None:
    assert decode('{"schema_version": 2}', 2).ok
    assert not decode('{"schema_version": 1}', 2).ok


def test_decode_model_validates_call_site_requirements() -> None:
    result = decode_model('{"schema_version": 1}', 1, CoreVersionPayload)

    assert result.error is not None
    assert result.error.code is BridgeErrorCode.INVALID_PAYLOAD


def test_decode_model_preserves_unknown_keys() -> None:
    result = decode_model('{"schema_version": 1, "version": "0.2.0", "python": "3.12"}', 1, CoreVersionPayload)

    assert result.data is not None
    assert result.data.version == "0.2.0"
    assert result.data.model_extra == {"python": "3.12"}


def test_project_detect_payload_reads_camel_case_fields() -> None:
    stdout = (
        '{"schema_version": 1, "input": "/work/app", "confidence": "strong",'
        ' "isRapidkitProject": true, "projectRoot": "/work/app", "engine": "python",'
        ' "markers": {"hasRapidkitDir": true}}'
    )

    result = decode_model(stdout, 1, ProjectDetectPayload)

    assert result.data is not None
    assert result.data.is_rapidkit_project is True
    assert result.data.project_root == "/work/app"
    assert result.data.confidence == "strong"


def test_project_detect_payload_rejects_unknown_confidence() -> None:
    stdout = '{"schema_version": 1, "confidence": "certain", "isRapidkitProject": false}'

    result = decode_model(stdout, 1, ProjectDetectPayload)

    assert result.error is not None
    assert result.error.code is BridgeErrorCode.INVALID_PAYLOAD


def test_command_list_names_accepts_strings_and_objects() -> None:
    payload = CommandListPayload.model_validate(
        {"schema_version": 1, "commands": ["create", {"name": "add"}, {"help": "missing"}, "  ", " doctor "]}
    )

    assert payload.names() == ["create", "add", "doctor"]
