"""Persistent stores used by monobuild."""

from .build_cache import BuildCache, clean_cache, package_cache_dir

__all__ = ["BuildCache", "clean_cache", "package_cache_dir"]
