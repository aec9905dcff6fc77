"""Package discovery: expand workspace globs and load member manifests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from .config import MANIFEST_FILENAME
from .errors import DuplicatePackageError, ManifestError
from .logging import get_logger
from .manifest import read_manifest
from .models import Monorepo, Package
from .paths import expand_globs, normalise_pattern

logger = get_logger("loader")


def _manifest_glob(pattern: str) -> str:
    normalised = normalise_pattern(pattern)
    if normalised in {"", "."}:
        return MANIFEST_FILENAME
    return f"{normalised}/{MANIFEST_FILENAME}"


def expand_manifest_paths(monorepo: Monorepo) -> List[Path]:
    """Return the sorted manifest paths selected by the workspace globs."""
    include: List[str] = []
    exclude: List[str] = []
    for pattern in monorepo.package_globs:
        stripped = pattern.strip()
        if stripped.startswith("!"):
            exclude.append(_manifest_glob(stripped[1:]))
        elif stripped:
            include.append(_manifest_glob(stripped))
    matches = expand_globs(monorepo.root, include, exclude)
    return [monorepo.root / rel_path for rel_path in matches]


def load_package(manifest_path: Path) -> Optional[Package]:
    """Load one manifest; return None (after a warning) when it cannot be used."""
    try:
        manifest = read_manifest(manifest_path)
    except ManifestError as exc:
        logger.warning("%s", exc)
        return None

    if manifest.name is None:
        logger.warning("Skipping %s: manifest has no name", manifest_path)
        return None

    return Package(
        dir=manifest_path.parent.resolve(),
        name=manifest.name,
        build_script=manifest.build_script,
        dependency_names=manifest.workspace_dependencies(),
        cache_config=manifest.settings.to_cache_config(),
        manifest_path=manifest_path,
    )


def load_packages(monorepo: Monorepo) -> List[Package]:
    """Load every workspace member, sorted by name."""
    by_name: Dict[str, Package] = {}
    for manifest_path in expand_manifest_paths(monorepo):
        package = load_package(manifest_path)
        if package is None:
            continue
        existing = by_name.get(package.name)
        if existing is not None:
            raise DuplicatePackageError(
                package.name,
                existing.manifest_path or existing.dir,
                manifest_path,
            )
        by_name[package.name] = package
    logger.debug("→ Loaded %d packages from %s", len(by_name), monorepo.root)
    return [by_name[name] for name in sorted(by_name)]


__all__ = ["expand_manifest_paths", "load_package", "load_packages"]
