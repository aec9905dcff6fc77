"""Monorepo build orchestration with dependency ordering and output caching."""

from .graph import DependencyGraph
from .models import CacheConfig, Monorepo, Package, PackageManager
from .orchestrator import CommandContext, Orchestrator

__version__ = "0.1.0"

__all__ = [
    "CacheConfig",
    "CommandContext",
    "DependencyGraph",
    "Monorepo",
    "Orchestrator",
    "Package",
    "PackageManager",
]
