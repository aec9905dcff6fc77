"""Tests for monobuild.config."""

from __future__ import annotations

import pytest

from monobuild.config import (
    ORCHESTRATOR_ENV_VAR,
    is_inside_orchestrator,
    orchestrator_env,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("true", True), ("TRUE", True), (" true ", True), ("false", False), ("1", False), ("", False)],
)
def test_recursion_guard_values(value: str, expected: bool) -> None:
    assert is_inside_orchestrator({ORCHESTRATOR_ENV_VAR: value}) is expected


def test_recursion_guard_absent() -> None:
    assert is_inside_orchestrator({}) is False


def test_recursion_guard_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ORCHESTRATOR_ENV_VAR, "true")

    assert is_inside_orchestrator() is True


def test_orchestrator_env_sets_sentinel() -> None:
    assert orchestrator_env() == {ORCHESTRATOR_ENV_VAR: "true"}
