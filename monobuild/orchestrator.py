"""Command flows for build, deps, all, graph and clean."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional, TextIO, Tuple

from .config import is_inside_orchestrator
from .errors import ActivePackageNotFound, CommandFailure, MonobuildError, WorkspaceNotFound
from .executor import BuildExecutor
from .graph import DependencyGraph
from .loader import load_packages
from .logging import get_logger
from .models import BuildReport, Monorepo, Package
from .runner import CommandRunner, SubprocessCommandRunner, format_command
from .stores import BuildCache, clean_cache
from .workspace import find_monorepo


@dataclass
class CommandContext:
    """Inputs shared by every command of one invocation."""

    cwd: Path = field(default_factory=Path.cwd)
    cmd_args: List[str] = field(default_factory=list)
    environ: Optional[Mapping[str, str]] = None


class Orchestrator:
    """Wires workspace resolution, graph construction, caching and execution."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        monorepo_finder: Callable[[Path], Monorepo] | None = None,
    ) -> None:
        self.runner = runner or SubprocessCommandRunner()
        self._find_monorepo = monorepo_finder or find_monorepo
        self.logger = get_logger("orchestrator")

    def run_build(self, ctx: CommandContext) -> Optional[BuildReport]:
        """Build the active package's dependencies, then the package itself."""
        if is_inside_orchestrator(ctx.environ):
            if not ctx.cmd_args:
                raise MonobuildError("No command provided")
            self._run_passthrough(ctx)
            return None

        monorepo, graph = self._load(ctx)
        active = self._require_active_package(ctx, graph)
        packages = [*graph.dependencies_build_order(active.name), active]
        return self._execute(monorepo, graph, packages)

    def run_deps(self, ctx: CommandContext) -> Optional[BuildReport]:
        """Build only the dependencies of the active package."""
        if is_inside_orchestrator(ctx.environ):
            self._run_passthrough(ctx)
            return None

        monorepo, graph = self._load(ctx)
        active = self._require_active_package(ctx, graph)
        return self._execute(monorepo, graph, graph.dependencies_build_order(active.name))

    def run_all(self, ctx: CommandContext) -> Optional[BuildReport]:
        """Build every workspace package in overall build order."""
        if is_inside_orchestrator(ctx.environ):
            self._run_passthrough(ctx)
            return None

        monorepo, graph = self._load(ctx)
        return self._execute(monorepo, graph, graph.overall_build_order())

    def run_graph(self, ctx: CommandContext, stream: TextIO | None = None) -> DependencyGraph:
        _, graph = self._load(ctx)
        graph.print(stream)
        return graph

    def run_clean(self, ctx: CommandContext) -> bool:
        """Delete the build cache of the enclosing monorepo, if any."""
        try:
            monorepo = self._find_monorepo(ctx.cwd)
        except WorkspaceNotFound:
            self.logger.debug("→ Not in monorepo")
            return False
        self.logger.debug("→ Deleting cache at %s", monorepo.cache_dir)
        removed = clean_cache(monorepo)
        self.logger.info("✓ Cache deleted")
        return removed

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, ctx: CommandContext) -> Tuple[Monorepo, DependencyGraph]:
        monorepo = self._find_monorepo(ctx.cwd)
        packages = load_packages(monorepo)
        graph = DependencyGraph.build(packages)
        return monorepo, graph

    def _require_active_package(self, ctx: CommandContext, graph: DependencyGraph) -> Package:
        active = graph.find_active_package(ctx.cwd)
        if active is None:
            raise ActivePackageNotFound(Path(ctx.cwd))
        self.logger.debug("→ Active package %s", active.dir)
        return active

    def _execute(
        self, monorepo: Monorepo, graph: DependencyGraph, packages: List[Package]
    ) -> BuildReport:
        cache = BuildCache(monorepo, graph)
        executor = BuildExecutor(monorepo, cache, self.runner)
        return executor.run(packages)

    def _run_passthrough(self, ctx: CommandContext) -> None:
        if not ctx.cmd_args:
            self.logger.debug("→ Inside monobuild with nothing to run")
            return
        self.logger.debug(
            "→ Ignoring monobuild, running command immediately: %s",
            format_command(ctx.cmd_args),
        )
        result = self.runner.run(ctx.cmd_args, cwd=Path(ctx.cwd))
        if result.returncode != 0:
            raise CommandFailure(ctx.cmd_args, result.returncode)


__all__ = ["CommandContext", "Orchestrator"]
