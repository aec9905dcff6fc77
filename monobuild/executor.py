"""Sequential build execution with cache restore and single-flight dedup."""

from __future__ import annotations

from typing import Iterable, Optional, Set

from .config import orchestrator_env
from .errors import BuildScriptFailure, CacheRestoreError, CacheWriteError
from .logging import get_logger
from .models import (
    BUILT,
    BUILT_UNCACHED,
    CACHED,
    NOTHING_TO_BUILD,
    BuildReport,
    Monorepo,
    Package,
    PackageOutcome,
)
from .runner import CommandRunner, SubprocessCommandRunner, format_command
from .stores import BuildCache


class BuildExecutor:
    """Builds packages strictly in the order given, restoring from cache when possible."""

    def __init__(
        self,
        monorepo: Monorepo,
        cache: BuildCache,
        runner: CommandRunner | None = None,
    ) -> None:
        self.monorepo = monorepo
        self.cache = cache
        self.runner = runner or SubprocessCommandRunner()
        self.logger = get_logger("executor")
        self._processed: Set[str] = set()

    def run(self, packages: Iterable[Package]) -> BuildReport:
        """Process ``packages`` in order; a failing build aborts the rest."""
        queue = list(packages)
        self.logger.debug(
            "→ Packages to build: %s", ", ".join(package.name for package in queue)
        )
        report = BuildReport()
        for package in queue:
            if package.name in self._processed:
                continue
            self._processed.add(package.name)
            report.outcomes.append(self._process(package))
        return report

    def _process(self, package: Package) -> PackageOutcome:
        if not package.build_script:
            self.logger.info("✓ %s: Nothing to build", package.name)
            return PackageOutcome(name=package.name, status=NOTHING_TO_BUILD)

        if not package.cache_config.cache_enabled:
            self._run_build_script(package)
            self.logger.info("✓ %s: Built", package.name)
            return PackageOutcome(name=package.name, status=BUILT_UNCACHED)

        result = self.cache.hash_package(package)
        package_hash = result.package_hash
        self.logger.debug(
            "→ Cache dir: %s", self.cache.package_cache_dir(package, package_hash)
        )

        if self.cache.is_package_cached(package, package_hash):
            restored = self._restore(package, package_hash)
            if restored:
                self.logger.info("✓ %s: Cached!", package.name)
                return PackageOutcome(
                    name=package.name, status=CACHED, package_hash=package_hash
                )

        self._run_build_script(package)
        try:
            self.cache.cache_package_output(package, package_hash)
        except CacheWriteError as exc:
            self.logger.warning("%s: output not cached (%s)", package.name, exc)
        self.logger.info("✓ %s: Built", package.name)
        return PackageOutcome(name=package.name, status=BUILT, package_hash=package_hash)

    def _restore(self, package: Package, package_hash: str) -> bool:
        try:
            self.cache.restore_package_cache(package, package_hash)
        except CacheRestoreError as exc:
            self.logger.warning("%s; rebuilding %s", exc, package.name)
            return False
        return True

    def _run_build_script(self, package: Package) -> None:
        command = [*self.monorepo.package_manager.run_command, "build"]
        self.logger.debug(
            "→ Running %s in %s", format_command(command), self._relative_dir(package)
        )
        self.logger.info("◐ %s: %s", package.name, package.build_script)
        result = self.runner.run(command, cwd=package.dir, env=orchestrator_env())
        if result.returncode != 0:
            raise BuildScriptFailure(package.name, result.returncode)

    def _relative_dir(self, package: Package) -> str:
        try:
            relative: Optional[str] = package.dir.relative_to(self.monorepo.root).as_posix()
        except ValueError:
            relative = None
        return relative or str(package.dir)


__all__ = ["BuildExecutor"]
