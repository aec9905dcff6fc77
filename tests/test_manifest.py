"""Tests for monobuild.manifest."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from monobuild.config import DEFAULT_EXCLUDE, DEFAULT_INCLUDE
from monobuild.errors import ManifestError
from monobuild.manifest import read_manifest


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_defaults_when_namespace_missing(tmp_path: Path) -> None:
    manifest = read_manifest(_write(tmp_path / "package.json", {"name": "a"}))

    config = manifest.settings.to_cache_config()
    assert config.cache_enabled is True
    assert config.out_dir == "dist"
    assert config.include_globs == DEFAULT_INCLUDE
    assert config.exclude_globs == DEFAULT_EXCLUDE
    assert manifest.build_script is None


def test_each_cache_option_overrides_independently(tmp_path: Path) -> None:
    manifest = read_manifest(
        _write(
            tmp_path / "package.json",
            {"name": "a", "monobuild": {"outDir": "lib", "include": "index.ts"}},
        )
    )

    config = manifest.settings.to_cache_config()
    assert config.cache_enabled is True
    assert config.out_dir == "lib"
    assert config.include_globs == ("index.ts",)
    assert config.exclude_globs == DEFAULT_EXCLUDE


def test_workspace_protocol_dependencies_only(tmp_path: Path) -> None:
    manifest = read_manifest(
        _write(
            tmp_path / "package.json",
            {
                "name": "app",
                "dependencies": {"lib": "workspace:*", "react": "^18.0.0"},
                "devDependencies": {"tooling": "workspace:^1.0.0", "vitest": "1.0.0"},
            },
        )
    )

    assert manifest.workspace_dependencies() == frozenset({"lib", "tooling"})


def test_null_sections_are_treated_as_empty(tmp_path: Path) -> None:
    manifest = read_manifest(
        _write(
            tmp_path / "package.json",
            {"name": "a", "dependencies": None, "scripts": None, "monobuild": None},
        )
    )

    assert manifest.workspace_dependencies() == frozenset()
    assert manifest.build_script is None
    assert manifest.settings.cache is True


def test_invalid_json_raises_manifest_error(tmp_path: Path) -> None:
    path = tmp_path / "package.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(ManifestError) as excinfo:
        read_manifest(path)

    assert excinfo.value.path == path


def test_shape_mismatch_raises_manifest_error(tmp_path: Path) -> None:
    path = _write(tmp_path / "package.json", {"name": "a", "dependencies": ["lib"]})

    with pytest.raises(ManifestError) as excinfo:
        read_manifest(path)

    assert "dependencies" in excinfo.value.reason


def test_non_object_root_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        read_manifest(_write(tmp_path / "package.json", ["not", "an", "object"]))
