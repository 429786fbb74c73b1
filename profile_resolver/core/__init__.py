"""Core models and contracts for profile resolution."""

from __future__ import annotations

from .interfaces import (
    MAX_REQUEST_LIMIT,
    NameLookupCache,
    ProfileCache,
    ProfileService,
    ProfileVisitor,
    should_stop,
    supports_name_lookup,
)
from .models import Profile

__all__ = [
    "MAX_REQUEST_LIMIT",
    "NameLookupCache",
    "Profile",
    "ProfileCache",
    "ProfileService",
    "ProfileVisitor",
    "should_stop",
    "supports_name_lookup",
]
