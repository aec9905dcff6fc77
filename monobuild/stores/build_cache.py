"""Content-addressable cache of package build outputs."""

from __future__ import annotations

import hashlib
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List

from ..errors import CacheRestoreError, CacheWriteError
from ..graph import DependencyGraph
from ..logging import get_logger
from ..models import CacheResult, Monorepo, Package
from ..paths import expand_globs

logger = get_logger("cache")


def _hash_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def package_cache_dir(monorepo: Monorepo, package: Package, package_hash: str) -> Path:
    """Directory holding the output snapshot for ``package`` at ``package_hash``."""
    return monorepo.cache_dir / package.name / package_hash


def clean_cache(monorepo: Monorepo) -> bool:
    """Remove the whole cache tree; return whether anything was deleted."""
    cache_dir = monorepo.cache_dir
    if not cache_dir.exists():
        logger.info("No cache directory found")
        return False
    shutil.rmtree(cache_dir)
    logger.info("Cache cleaned: %s", cache_dir)
    return True


class BuildCache:
    """Hashes packages and stores their outputs keyed by that hash.

    One instance serves a single invocation. Hashes are memoised for that
    invocation only, and a package's dependencies are always hashed before
    the package itself so every digest covers its transitive closure.
    """

    def __init__(self, monorepo: Monorepo, graph: DependencyGraph) -> None:
        self._monorepo = monorepo
        self._graph = graph
        self._results: Dict[str, CacheResult] = {}

    @property
    def root(self) -> Path:
        return self._monorepo.cache_dir

    def hash_package(self, package: Package) -> CacheResult:
        """Hash tracked files of ``package`` combined with its dependencies' hashes."""
        for dependency in self._graph.dependencies_build_order(package.name):
            self._hash_single(dependency)
        return self._hash_single(package)

    def tracked_files(self, package: Package) -> List[str]:
        config = package.cache_config
        return expand_globs(package.dir, config.include_globs, config.exclude_globs)

    def package_cache_dir(self, package: Package, package_hash: str) -> Path:
        return package_cache_dir(self._monorepo, package, package_hash)

    def is_package_cached(self, package: Package, package_hash: str) -> bool:
        cache_dir = self.package_cache_dir(package, package_hash)
        if not cache_dir.is_dir():
            return False
        return any(cache_dir.iterdir())

    def restore_package_cache(self, package: Package, package_hash: str) -> None:
        """Copy a cache entry back into the package's output directory."""
        cache_dir = self.package_cache_dir(package, package_hash)
        out_dir = package.out_dir
        if not cache_dir.is_dir():
            raise CacheRestoreError(f"Cache directory not found: {cache_dir}")
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            shutil.copytree(cache_dir, out_dir, dirs_exist_ok=True)
        except OSError as exc:
            raise CacheRestoreError(
                f"Failed to restore {package.name} from {cache_dir}: {exc}"
            ) from exc

    def cache_package_output(self, package: Package, package_hash: str) -> Path:
        """Snapshot the output directory into the cache via a temporary sibling."""
        out_dir = package.out_dir
        if not out_dir.is_dir():
            raise CacheWriteError(f"Output directory not found: {out_dir}")

        target = self.package_cache_dir(package, package_hash)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            staging = Path(
                tempfile.mkdtemp(prefix=f".{package_hash}.", suffix=".tmp", dir=target.parent)
            )
        except OSError as exc:
            raise CacheWriteError(f"Failed to prepare cache for {package.name}: {exc}") from exc

        try:
            shutil.copytree(out_dir, staging, dirs_exist_ok=True)
            if target.is_dir() and not any(target.iterdir()):
                target.rmdir()
            if target.exists():
                logger.debug("→ Cache entry %s already present", target)
                shutil.rmtree(staging, ignore_errors=True)
                return target
            staging.rename(target)
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            if self.is_package_cached(package, package_hash):
                return target
            raise CacheWriteError(
                f"Failed to cache output of {package.name}: {exc}"
            ) from exc
        return target

    def clean_cache(self) -> bool:
        return clean_cache(self._monorepo)

    # ------------------------------------------------------------------
    # Internal helpers

    def _hash_single(self, package: Package) -> CacheResult:
        existing = self._results.get(package.name)
        if existing is not None:
            return existing

        tracked = self.tracked_files(package)
        if not tracked:
            logger.warning(
                "No tracked files for %s (include: %s)",
                package.name,
                ", ".join(package.cache_config.include_globs),
            )

        lines: List[str] = []
        for rel_path in tracked:
            lines.append(f"{_hash_file(package.dir / rel_path)}  {rel_path}")
        for dependency in sorted(package.dependency_names):
            dependency_hash = self._results[dependency].package_hash
            lines.append(f"dep {dependency} {dependency_hash}")

        file_hashes = "\n".join(lines)
        package_hash = hashlib.sha256(file_hashes.encode("utf-8")).hexdigest()
        result = CacheResult(package_hash=package_hash, file_hashes=file_hashes)
        self._results[package.name] = result
        return result


__all__ = ["BuildCache", "clean_cache", "package_cache_dir"]
