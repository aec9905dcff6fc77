from __future__ import annotations

import logging
from pathlib import Path

import pytest

from monobuild.config import ORCHESTRATOR_ENV_VAR
from tests._fixtures.workspace_builder import WorkspaceBuilder


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a reusable workspace builder rooted at the pytest tmp_path."""
    return WorkspaceBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _clear_recursion_guard(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests may themselves run under monobuild; start from a clean environment."""
    monkeypatch.delenv(ORCHESTRATOR_ENV_VAR, raising=False)


@pytest.fixture(autouse=True)
def _reset_monobuild_logger() -> None:
    """Undo configure_logging() from CLI tests so caplog sees records."""
    logger = logging.getLogger("monobuild")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
