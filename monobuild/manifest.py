"""Manifest reader turning package.json files into validated records."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import (
    DEFAULT_CACHE_ENABLED,
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    DEFAULT_OUT_DIR,
    MANIFEST_NAMESPACE,
    WORKSPACE_PROTOCOL,
)
from .errors import ManifestError
from .models import CacheConfig


class CacheSettings(BaseModel):
    """Recognised options of the ``monobuild`` manifest namespace."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    cache: bool = DEFAULT_CACHE_ENABLED
    out_dir: str = Field(default=DEFAULT_OUT_DIR, alias="outDir")
    include: List[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE))

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def _single_glob_to_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    def to_cache_config(self) -> CacheConfig:
        return CacheConfig(
            cache_enabled=self.cache,
            out_dir=self.out_dir,
            include_globs=tuple(self.include),
            exclude_globs=tuple(self.exclude),
        )


class PackageManifest(BaseModel):
    """The subset of package.json the orchestrator understands."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Optional[str] = None
    scripts: Dict[str, Any] = Field(default_factory=dict)
    dependencies: Dict[str, Any] = Field(default_factory=dict)
    dev_dependencies: Dict[str, Any] = Field(default_factory=dict, alias="devDependencies")
    workspaces: Any = None
    settings: CacheSettings = Field(default_factory=CacheSettings, alias=MANIFEST_NAMESPACE)

    @field_validator("scripts", "dependencies", "dev_dependencies", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("settings", mode="before")
    @classmethod
    def _null_settings(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def _blank_name(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def build_script(self) -> Optional[str]:
        script = self.scripts.get("build")
        return script if isinstance(script, str) and script.strip() else None

    def workspace_dependencies(self) -> frozenset[str]:
        """Names of dependencies declared with the workspace protocol."""
        merged = {**self.dependencies, **self.dev_dependencies}
        return frozenset(
            name
            for name, specifier in merged.items()
            if isinstance(specifier, str) and specifier.startswith(WORKSPACE_PROTOCOL)
        )

    def workspace_globs(self) -> Optional[List[str]]:
        """Return the ``workspaces`` globs, or None when the field is absent."""
        value = self.workspaces
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get("packages", [])
        if isinstance(value, list):
            return [str(item) for item in value if isinstance(item, str)]
        return []


def read_raw_manifest(path: Path) -> Dict[str, Any]:
    """Parse a manifest file into a mapping."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(path, str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(path, f"invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ManifestError(path, "manifest must contain an object at the root")
    return data


def read_manifest(path: Path) -> PackageManifest:
    """Read and validate a manifest file."""
    data = read_raw_manifest(path)
    try:
        return PackageManifest.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ManifestError(path, details) from exc


__all__ = [
    "CacheSettings",
    "PackageManifest",
    "read_manifest",
    "read_raw_manifest",
]
