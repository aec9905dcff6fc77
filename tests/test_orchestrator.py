"""Tests for monobuild.orchestrator."""

from __future__ import annotations

import io
import shutil
from pathlib import Path

import pytest

from monobuild.config import ORCHESTRATOR_ENV_VAR
from monobuild.errors import (
    ActivePackageNotFound,
    CommandFailure,
    CycleDetected,
    MonobuildError,
    WorkspaceNotFound,
)
from monobuild.orchestrator import CommandContext, Orchestrator
from monobuild.runner import RecordingCommandRunner
from tests._fixtures.build_runner import FakeBuildRunner

GUARD = {ORCHESTRATOR_ENV_VAR: "true"}


def _chain(workspace) -> None:
    workspace.init_workspace()
    workspace.add_package("packages/a", "a")
    workspace.add_package("packages/b", "b", deps=["a"])
    workspace.add_package("packages/c", "c", deps=["b"])


def test_run_deps_builds_dependencies_but_not_active_package(workspace) -> None:
    _chain(workspace)
    runner = FakeBuildRunner()
    orchestrator = Orchestrator(runner=runner)

    report = orchestrator.run_deps(CommandContext(cwd=workspace.path("packages/c/src"), environ={}))

    assert runner.built_dirs == ["a", "b"]
    assert report is not None
    assert report.names() == ["a", "b"]


def test_run_build_finishes_with_active_package(workspace) -> None:
    _chain(workspace)
    runner = FakeBuildRunner()
    orchestrator = Orchestrator(runner=runner)

    report = orchestrator.run_build(CommandContext(cwd=workspace.path("packages/b"), environ={}))

    assert runner.built_dirs == ["a", "b"]
    assert report.built == ["a", "b"]


def test_run_all_after_clean_rebuilds_everything(workspace) -> None:
    _chain(workspace)
    ctx = CommandContext(cwd=workspace.path(), environ={})
    Orchestrator(runner=FakeBuildRunner()).run_all(ctx)

    assert Orchestrator().run_clean(ctx) is True
    assert not workspace.path(".cache").exists()

    runner = FakeBuildRunner()
    report = Orchestrator(runner=runner).run_all(ctx)

    assert runner.built_dirs == ["a", "b", "c"]
    assert report.cached == []


def test_run_all_twice_hits_cache(workspace) -> None:
    _chain(workspace)
    ctx = CommandContext(cwd=workspace.path(), environ={})
    Orchestrator(runner=FakeBuildRunner()).run_all(ctx)
    shutil.rmtree(workspace.path("packages/a/dist"))

    runner = FakeBuildRunner()
    report = Orchestrator(runner=runner).run_all(ctx)

    assert runner.calls == []
    assert report.cached == ["a", "b", "c"]
    assert workspace.path("packages/a/dist/index.js").exists()


def test_build_outside_package_directory(workspace) -> None:
    _chain(workspace)
    workspace.write({"docs/README.md": "# docs\n"})
    orchestrator = Orchestrator(runner=FakeBuildRunner())

    with pytest.raises(ActivePackageNotFound):
        orchestrator.run_build(CommandContext(cwd=workspace.path("docs"), environ={}))


def test_build_outside_monorepo(tmp_path: Path) -> None:
    orchestrator = Orchestrator(runner=FakeBuildRunner())

    with pytest.raises(WorkspaceNotFound):
        orchestrator.run_all(CommandContext(cwd=tmp_path, environ={}))


def test_cycle_aborts_before_any_build(workspace) -> None:
    workspace.init_workspace()
    workspace.add_package("packages/a", "a", deps=["b"])
    workspace.add_package("packages/b", "b", deps=["a"])
    runner = FakeBuildRunner()

    with pytest.raises(CycleDetected):
        Orchestrator(runner=runner).run_all(CommandContext(cwd=workspace.path(), environ={}))

    assert runner.calls == []


def test_guard_runs_command_verbatim(workspace) -> None:
    _chain(workspace)
    runner = RecordingCommandRunner()
    cwd = workspace.path("packages/b")
    ctx = CommandContext(cwd=cwd, cmd_args=["tsc", "--noEmit"], environ=GUARD)

    report = Orchestrator(runner=runner).run_build(ctx)

    assert report is None
    assert len(runner.commands) == 1
    assert runner.commands[0].command == ["tsc", "--noEmit"]
    assert runner.commands[0].cwd == cwd


def test_guard_without_command_is_an_error_for_build(workspace) -> None:
    runner = RecordingCommandRunner()
    ctx = CommandContext(cwd=workspace.path(), environ=GUARD)

    with pytest.raises(MonobuildError, match="No command provided"):
        Orchestrator(runner=runner).run_build(ctx)

    assert runner.commands == []


def test_guard_without_command_is_a_no_op_for_deps_and_all(workspace) -> None:
    runner = RecordingCommandRunner()
    ctx = CommandContext(cwd=workspace.path(), environ=GUARD)
    orchestrator = Orchestrator(runner=runner)

    assert orchestrator.run_deps(ctx) is None
    assert orchestrator.run_all(ctx) is None
    assert runner.commands == []


def test_guard_propagates_command_exit_code(workspace) -> None:
    runner = RecordingCommandRunner(returncode=3)
    ctx = CommandContext(cwd=workspace.path(), cmd_args=["false"], environ=GUARD)

    with pytest.raises(CommandFailure) as excinfo:
        Orchestrator(runner=runner).run_all(ctx)

    assert excinfo.value.returncode == 3


def test_run_graph_prints_adjacency(workspace) -> None:
    _chain(workspace)
    stream = io.StringIO()

    graph = Orchestrator().run_graph(CommandContext(cwd=workspace.path(), environ={}), stream)

    assert len(graph) == 3
    lines = stream.getvalue().splitlines()
    assert lines[0] == "Dependency Graph:"
    assert "  c -> b" in lines
    assert "  a" in lines


def test_run_clean_outside_monorepo(tmp_path: Path) -> None:
    assert Orchestrator().run_clean(CommandContext(cwd=tmp_path, environ={})) is False


def test_custom_monorepo_finder_is_used(workspace) -> None:
    _chain(workspace)
    seen: list[Path] = []

    def _finder(start: Path):
        seen.append(start)
        return workspace.monorepo()

    Orchestrator(runner=FakeBuildRunner(), monorepo_finder=_finder).run_all(
        CommandContext(cwd=workspace.path("packages/a"), environ={})
    )

    assert seen == [workspace.path("packages/a")]
