"""Core data models shared across monobuild components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Tuple

from .config import (
    CACHE_DIR_NAME,
    DEFAULT_CACHE_ENABLED,
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    DEFAULT_OUT_DIR,
)


@dataclass(frozen=True)
class PackageManager:
    """Package manager owning the workspace and the command used to run scripts."""

    name: str
    run_command: Tuple[str, ...]


@dataclass(frozen=True)
class CacheConfig:
    """Per-package cache settings read from the manifest namespace."""

    cache_enabled: bool = DEFAULT_CACHE_ENABLED
    out_dir: str = DEFAULT_OUT_DIR
    include_globs: Tuple[str, ...] = DEFAULT_INCLUDE
    exclude_globs: Tuple[str, ...] = DEFAULT_EXCLUDE


@dataclass(frozen=True)
class Package:
    """A workspace member loaded from one package.json."""

    dir: Path
    name: str
    build_script: Optional[str] = None
    dependency_names: FrozenSet[str] = frozenset()
    cache_config: CacheConfig = field(default_factory=CacheConfig)
    manifest_path: Optional[Path] = None

    @property
    def out_dir(self) -> Path:
        return self.dir / self.cache_config.out_dir


@dataclass(frozen=True)
class Monorepo:
    """Workspace root, its package manager and the globs enumerating members."""

    root: Path
    package_manager: PackageManager
    package_globs: Tuple[str, ...]

    @property
    def cache_dir(self) -> Path:
        return self.root / CACHE_DIR_NAME


@dataclass(frozen=True)
class CacheResult:
    """Content hash of a package and the listing it was derived from."""

    package_hash: str
    file_hashes: str


BUILT = "built"
BUILT_UNCACHED = "built-uncached"
CACHED = "cached"
NOTHING_TO_BUILD = "nothing-to-build"


@dataclass(frozen=True)
class PackageOutcome:
    """What the executor did for one package."""

    name: str
    status: str
    package_hash: Optional[str] = None


@dataclass
class BuildReport:
    """Ordered outcomes of one executor run."""

    outcomes: List[PackageOutcome] = field(default_factory=list)

    @property
    def built(self) -> List[str]:
        return [
            outcome.name
            for outcome in self.outcomes
            if outcome.status in {BUILT, BUILT_UNCACHED}
        ]

    @property
    def cached(self) -> List[str]:
        return [outcome.name for outcome in self.outcomes if outcome.status == CACHED]

    def names(self) -> List[str]:
        return [outcome.name for outcome in self.outcomes]
