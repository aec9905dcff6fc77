"""Exception hierarchy for workspace resolution, graph building and execution."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class MonobuildError(RuntimeError):
    """Base class for errors that terminate a monobuild command."""


class WorkspaceNotFound(MonobuildError):
    """Raised when no workspace marker exists between a directory and the filesystem root."""

    def __init__(self, start: Path) -> None:
        super().__init__(
            f"Monorepo root not found above {start}. Are you inside a monorepo?"
        )
        self.start = start


class ManifestError(MonobuildError):
    """Raised by the manifest reader when a package.json cannot be used."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to read manifest at {path}: {reason}")
        self.path = path
        self.reason = reason


class DuplicatePackageError(MonobuildError):
    """Raised when two manifests declare the same package name."""

    def __init__(self, name: str, first: Path, second: Path) -> None:
        super().__init__(
            f"Package name {name!r} is declared by both {first} and {second}"
        )
        self.name = name
        self.paths = (first, second)


class CycleDetected(MonobuildError):
    """Raised when workspace dependencies form a cycle."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        chain = " -> ".join([*self.cycle, self.cycle[0]]) if self.cycle else ""
        super().__init__(f"Dependency cycle detected: {chain}")


class PackageNotFound(MonobuildError):
    """Raised when a package name is not part of the loaded workspace."""

    def __init__(self, name: str, *, required_by: str | None = None) -> None:
        if required_by:
            message = f"Package {name!r} required by {required_by!r} is not in the workspace"
        else:
            message = f"Package {name!r} is not in the workspace"
        super().__init__(message)
        self.name = name
        self.required_by = required_by


class ActivePackageNotFound(MonobuildError):
    """Raised when a scoped command runs outside every package directory."""

    def __init__(self, cwd: Path) -> None:
        super().__init__(
            f"Not inside a package directory ({cwd}), could not determine dependencies to build"
        )
        self.cwd = cwd


class CacheRestoreError(MonobuildError):
    """Raised when a cache entry disappears or cannot be copied back."""


class CacheWriteError(MonobuildError):
    """Raised when build output cannot be stored in the cache."""


class BuildScriptFailure(MonobuildError):
    """Raised when a package build script exits with a non-zero status."""

    def __init__(self, package: str, returncode: int) -> None:
        super().__init__(
            f"Build failed for package {package!r} (exit code {returncode})"
        )
        self.package = package
        self.returncode = returncode


class CommandFailure(MonobuildError):
    """Raised when a command passed through under the recursion guard fails."""

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        super().__init__(
            f"Command failed with exit code {returncode}: {' '.join(command)}"
        )
        self.command = list(command)
        self.returncode = returncode


__all__ = [
    "ActivePackageNotFound",
    "BuildScriptFailure",
    "CacheRestoreError",
    "CacheWriteError",
    "CommandFailure",
    "CycleDetected",
    "DuplicatePackageError",
    "ManifestError",
    "MonobuildError",
    "PackageNotFound",
    "WorkspaceNotFound",
]
