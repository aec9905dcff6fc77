"""Defaults and process-level settings for monobuild."""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

ORCHESTRATOR_ENV_VAR = "INSIDE_MONOBUILD"
ORCHESTRATOR_ENV_SENTINEL = "true"

CACHE_DIR_NAME = ".cache"
MANIFEST_FILENAME = "package.json"
PNPM_WORKSPACE_FILENAME = "pnpm-workspace.yaml"

# Namespace inside package.json holding per-package cache settings.
MANIFEST_NAMESPACE = "monobuild"

WORKSPACE_PROTOCOL = "workspace:"

DEFAULT_CACHE_ENABLED = True
DEFAULT_OUT_DIR = "dist"
DEFAULT_INCLUDE: tuple[str, ...] = ("src/**/*",)
DEFAULT_EXCLUDE: tuple[str, ...] = (
    "**/__tests__/**",
    "**/__mocks__/**",
    "**/*.test.*",
    "**/e2e/**",
    "**/dist/**",
    "**/.output/**",
)

IGNORED_DIRS = frozenset({"node_modules", ".git", CACHE_DIR_NAME})


def is_inside_orchestrator(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when a parent monobuild process has set the recursion guard."""
    env = os.environ if environ is None else environ
    return _as_bool(env.get(ORCHESTRATOR_ENV_VAR)) is True


def orchestrator_env() -> dict[str, str]:
    """Environment additions injected into every build script."""
    return {ORCHESTRATOR_ENV_VAR: ORCHESTRATOR_ENV_SENTINEL}


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == ORCHESTRATOR_ENV_SENTINEL:
            return True
        if lowered in {"false", "0", ""}:
            return False
    return None


__all__ = [
    "CACHE_DIR_NAME",
    "DEFAULT_CACHE_ENABLED",
    "DEFAULT_EXCLUDE",
    "DEFAULT_INCLUDE",
    "DEFAULT_OUT_DIR",
    "IGNORED_DIRS",
    "MANIFEST_FILENAME",
    "MANIFEST_NAMESPACE",
    "ORCHESTRATOR_ENV_SENTINEL",
    "ORCHESTRATOR_ENV_VAR",
    "PNPM_WORKSPACE_FILENAME",
    "WORKSPACE_PROTOCOL",
    "is_inside_orchestrator",
    "orchestrator_env",
]
