"""Glob matching and file expansion relative to a base directory.

Patterns follow globby's defaults: ``**`` spans directories, ``{a,b}``
expands, ``!`` is not special, and wildcards never match dotfiles unless the
pattern spells the leading dot out.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from wcmatch import glob

from .config import IGNORED_DIRS

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.FORCEUNIX


def normalise_pattern(pattern: str) -> str:
    normalised = pattern.strip().replace("\\", "/")
    while normalised.startswith("./"):
        normalised = normalised[2:]
    return normalised.rstrip("/") if normalised != "/" else normalised


def is_literal(pattern: str) -> bool:
    return not glob.is_magic(pattern, flags=GLOB_FLAGS)


def literal_prefix(pattern: str) -> str:
    """Leading directory segments of ``pattern`` that contain no wildcards."""
    segments = normalise_pattern(pattern).split("/")
    prefix: List[str] = []
    for segment in segments[:-1]:
        if not is_literal(segment):
            break
        prefix.append(segment)
    return "/".join(prefix)


class GlobSet:
    """Globs tested together against POSIX relative paths."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = [
            normalised for normalised in map(normalise_pattern, patterns) if normalised
        ]

    def matches(self, rel_path: str) -> bool:
        if not self.patterns:
            return False
        return glob.globmatch(rel_path, self.patterns, flags=GLOB_FLAGS)

    def __bool__(self) -> bool:
        return bool(self.patterns)


def _iter_relative_files(base: Path, start: Path) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(start):
        dirnames[:] = sorted(name for name in dirnames if name not in IGNORED_DIRS)
        current = Path(dirpath)
        for filename in filenames:
            path = current / filename
            if path.is_file():
                yield path.relative_to(base).as_posix()


def expand_globs(
    base: Path, include: Sequence[str], exclude: Sequence[str] = ()
) -> List[str]:
    """Return sorted POSIX paths under ``base`` matched by ``include`` minus ``exclude``."""
    excluded = GlobSet(exclude)
    found: set[str] = set()
    for pattern in GlobSet(include).patterns:
        if is_literal(pattern):
            candidates: Iterable[str] = [pattern] if (base / pattern).is_file() else []
        else:
            start = base / literal_prefix(pattern)
            if not start.is_dir():
                continue
            candidates = _iter_relative_files(base, start)
        for rel_path in candidates:
            if rel_path in found:
                continue
            if not glob.globmatch(rel_path, pattern, flags=GLOB_FLAGS):
                continue
            if excluded.matches(rel_path):
                continue
            found.add(rel_path)
    return sorted(found)


__all__ = [
    "GLOB_FLAGS",
    "GlobSet",
    "expand_globs",
    "is_literal",
    "literal_prefix",
    "normalise_pattern",
]
