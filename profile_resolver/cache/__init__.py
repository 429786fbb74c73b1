"""Profile caches.

Every cache follows the ``ProfileCache`` contract; caches that can also
look profiles up by name satisfy ``NameLookupCache``."""

from __future__ import annotations

from .base import AbstractProfileCache
from .hash_map_cache import HashMapCache
from .sqlite_cache import SQLiteCache

__all__ = [
    "AbstractProfileCache",
    "HashMapCache",
    "SQLiteCache",
]
