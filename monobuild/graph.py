"""Dependency graph over workspace packages.

Edges point from a package to the workspace packages it depends on, so a
dependency always builds before its dependents. The graph is constructed once
per invocation and is read-only afterwards.
"""

from __future__ import annotations

import heapq
import sys
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, TextIO, Tuple

from .errors import CycleDetected, PackageNotFound
from .logging import get_logger
from .models import Package

logger = get_logger("graph")


class DependencyGraph:
    """Topological queries over a validated, acyclic set of packages."""

    def __init__(self, packages: Iterable[Package]) -> None:
        self._packages: Dict[str, Package] = {}
        for package in packages:
            self._packages[package.name] = package
        self._dependencies: Dict[str, FrozenSet[str]] = {
            name: package.dependency_names for name, package in self._packages.items()
        }
        self._dependents: Dict[str, List[str]] = {name: [] for name in self._packages}
        for name in sorted(self._packages):
            for dependency in sorted(self._dependencies[name]):
                if dependency not in self._packages:
                    raise PackageNotFound(dependency, required_by=name)
                self._dependents[dependency].append(name)
        self._detect_cycles()

    @classmethod
    def build(cls, packages: Iterable[Package]) -> "DependencyGraph":
        """Construct the graph, rejecting unknown edge targets and cycles."""
        return cls(packages)

    # ------------------------------------------------------------------
    # Membership

    @property
    def packages(self) -> List[Package]:
        return [self._packages[name] for name in sorted(self._packages)]

    def get(self, name: str) -> Package:
        try:
            return self._packages[name]
        except KeyError:
            raise PackageNotFound(name) from None

    def dependencies_of(self, name: str) -> List[str]:
        """Direct dependencies of ``name`` sorted by name."""
        self.get(name)
        return sorted(self._dependencies[name])

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)

    # ------------------------------------------------------------------
    # Ordering

    def overall_build_order(self) -> List[Package]:
        """All packages, dependencies first, ties broken by ascending name."""
        return self._topological_order(set(self._packages))

    def dependencies_build_order(self, name: str) -> List[Package]:
        """Transitive dependencies of ``name`` in build order, excluding ``name``."""
        self.get(name)
        closure: Set[str] = set()
        stack = list(self._dependencies[name])
        while stack:
            current = stack.pop()
            if current in closure:
                continue
            closure.add(current)
            stack.extend(self._dependencies[current] - closure)
        return self._topological_order(closure)

    def find_active_package(self, cwd: Path | str) -> Optional[Package]:
        """Return the most specific package whose directory contains ``cwd``."""
        current = Path(cwd).expanduser().resolve()
        best: Optional[Package] = None
        for package in self._packages.values():
            if current != package.dir and package.dir not in current.parents:
                continue
            if best is None or len(package.dir.parts) > len(best.dir.parts):
                best = package
        return best

    # ------------------------------------------------------------------
    # Output

    def render(self) -> str:
        lines = ["Dependency Graph:"]
        for package in self.overall_build_order():
            dependencies = self.dependencies_of(package.name)
            if dependencies:
                lines.append(f"  {package.name} -> {', '.join(dependencies)}")
            else:
                lines.append(f"  {package.name}")
        return "\n".join(lines)

    def print(self, stream: TextIO | None = None) -> None:
        out = stream if stream is not None else sys.stdout
        out.write(self.render() + "\n")

    # ------------------------------------------------------------------
    # Internal helpers

    def _topological_order(self, names: Set[str]) -> List[Package]:
        remaining = {name: len(self._dependencies[name] & names) for name in names}
        ready = [name for name, count in remaining.items() if count == 0]
        heapq.heapify(ready)
        order: List[Package] = []
        while ready:
            name = heapq.heappop(ready)
            order.append(self._packages[name])
            for dependent in self._dependents[name]:
                if dependent not in remaining:
                    continue
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, dependent)
        return order

    def _detect_cycles(self) -> None:
        visited: Set[str] = set()
        for start in sorted(self._packages):
            if start in visited:
                continue
            path: List[str] = [start]
            visiting: Set[str] = {start}
            stack: List[Tuple[str, Iterator[str]]] = [
                (start, iter(sorted(self._dependencies[start])))
            ]
            while stack:
                node, children = stack[-1]
                child = next(children, None)
                if child is None:
                    stack.pop()
                    path.pop()
                    visiting.discard(node)
                    visited.add(node)
                    continue
                if child in visiting:
                    cycle = path[path.index(child) :]
                    logger.debug("→ Cycle detected: %s", " -> ".join(cycle))
                    raise CycleDetected(cycle)
                if child in visited:
                    continue
                path.append(child)
                visiting.add(child)
                stack.append((child, iter(sorted(self._dependencies[child]))))


__all__ = ["DependencyGraph"]
