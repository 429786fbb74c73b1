"""Resolve Minecraft-style player names and UUIDs through composable sources.

Sources (remote HTTP API, local maps, caches, a host player registry) share the
``ProfileService`` contract and can be combined, cached and parallelized.
"""

from __future__ import annotations

from .core import Profile, ProfileCache, ProfileService
from .errors import (
    CacheError,
    ConfigurationError,
    LookupCancelledError,
    ProfileServiceError,
    ResolverError,
)
from .factory import ProfilePipeline, build_profile_service

__version__ = "0.1.0"

__all__ = [
    "CacheError",
    "ConfigurationError",
    "LookupCancelledError",
    "Profile",
    "ProfileCache",
    "ProfilePipeline",
    "ProfileService",
    "ProfileServiceError",
    "ResolverError",
    "build_profile_service",
]
