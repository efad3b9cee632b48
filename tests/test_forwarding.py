# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for separating tool flags from forwarded engine arguments."""

from __future__ import annotations

from rapidkit_bridge.forwarding import ForwardRequest, should_forward, split_forwarded_args


def test_tool_flags_are_removed() -> None:
    request = split_forwarded_args(["--debug", "create", "project", "--bridge-debug", "--name", "demo"])

    assert request.engine_args == ("create", "project", "--name", "demo")
    assert request.debug is True
    assert request.command == "create"


def test_arguments_after_separator_are_untouched() -> None:
    request = split_forwarded_args(["lint", "--", "--debug", "src"])

    assert request.engine_args == ("lint", "--", "--debug", "src")
    assert request.debug is False


def test_flag_only_invocation_has_no_command() -> None:
    request = split_forwarded_args(["--version"])

    assert request.command is None
    assert should_forward(request, {"create"})


def test_command_after_leading_options() -> None:
    assert split_forwarded_args(["-v", "doctor"]).command == "doctor"


def test_separator_hides_positionals() -> None:
    assert ForwardRequest(engine_args=("--", "create")).command is None


def test_should_forward_known_and_unknown_commands() -> None:
    known = {"create", "doctor"}

    assert should_forward(split_forwarded_args(["doctor"]), known)
    assert not should_forward(split_forwarded_args(["frobnicate"]), known)


def test_well_known_commands_are_forwarded_without_discovery() -> None:
    assert should_forward(split_forwarded_args(["create", "project", "demo"]), {"doctor"})
    assert should_forward(split_forwarded_args(["modules", "list"]), set())
