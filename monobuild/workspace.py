"""Workspace root discovery and package manager detection."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import yaml

from .config import MANIFEST_FILENAME, PNPM_WORKSPACE_FILENAME
from .errors import ManifestError, WorkspaceNotFound
from .logging import get_logger
from .manifest import read_manifest
from .models import Monorepo, PackageManager

logger = get_logger("workspace")

PACKAGE_MANAGERS = {
    "npm": PackageManager(name="npm", run_command=("npm", "run")),
    "pnpm": PackageManager(name="pnpm", run_command=("pnpm", "--silent", "run")),
    "yarn": PackageManager(name="yarn", run_command=("yarn", "run")),
    "bun": PackageManager(name="bun", run_command=("bun", "--silent", "run")),
}

FALLBACK_PACKAGE_MANAGER = "bun"

# Checked in order at each directory; the first manager with a marker wins.
_LOCKFILES: Sequence[Tuple[str, Sequence[str]]] = (
    ("npm", ("package-lock.json",)),
    ("pnpm", ("pnpm-lock.yaml", PNPM_WORKSPACE_FILENAME)),
    ("bun", ("bun.lockb", "bun.lock")),
    ("yarn", ("yarn.lock", ".yarnrc.yml")),
)


def _walk_up(start: Path) -> Iterator[Path]:
    current = start
    while True:
        yield current
        parent = current.parent
        if parent == current:
            return
        current = parent


def detect_package_manager(directory: Path) -> Optional[PackageManager]:
    """Infer the package manager from lockfiles in ``directory`` or its ancestors."""
    for candidate in _walk_up(directory.resolve()):
        for name, markers in _LOCKFILES:
            if any((candidate / marker).exists() for marker in markers):
                return PACKAGE_MANAGERS[name]
    return None


def _read_pnpm_workspace(directory: Path) -> Optional[Monorepo]:
    path = directory / PNPM_WORKSPACE_FILENAME
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return None
    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.warning("Failed to parse %s: expected a mapping at the root", path)
        return None
    packages = data.get("packages") or []
    if not isinstance(packages, list):
        logger.warning("Failed to parse %s: 'packages' must be a list", path)
        return None
    return Monorepo(
        root=directory,
        package_manager=PACKAGE_MANAGERS["pnpm"],
        package_globs=tuple(str(item) for item in packages if isinstance(item, str)),
    )


def _read_manifest_workspace(directory: Path) -> Optional[Monorepo]:
    path = directory / MANIFEST_FILENAME
    if not path.is_file():
        return None
    try:
        manifest = read_manifest(path)
    except ManifestError as exc:
        logger.warning("%s", exc)
        return None
    globs: Optional[List[str]] = manifest.workspace_globs()
    if globs is None:
        return None
    package_manager = detect_package_manager(directory)
    if package_manager is None:
        logger.debug(
            "→ No lockfile found for %s, defaulting to %s",
            directory,
            FALLBACK_PACKAGE_MANAGER,
        )
        package_manager = PACKAGE_MANAGERS[FALLBACK_PACKAGE_MANAGER]
    return Monorepo(
        root=directory,
        package_manager=package_manager,
        package_globs=tuple(globs),
    )


def read_workspace(directory: Path) -> Optional[Monorepo]:
    """Return the workspace rooted exactly at ``directory``, if it declares one."""
    return _read_pnpm_workspace(directory) or _read_manifest_workspace(directory)


def find_monorepo(start: Path | str | None = None) -> Monorepo:
    """Walk upward from ``start`` until a workspace marker is found."""
    origin = Path(start if start is not None else Path.cwd()).expanduser().resolve()
    for directory in _walk_up(origin):
        monorepo = read_workspace(directory)
        if monorepo is not None:
            logger.debug("→ Monorepo found at %s", monorepo.root)
            return monorepo
    raise WorkspaceNotFound(origin)


__all__ = [
    "FALLBACK_PACKAGE_MANAGER",
    "PACKAGE_MANAGERS",
    "detect_package_manager",
    "find_monorepo",
    "read_workspace",
]
