"""Lookup sources and decorators.

Sources resolve names and UUIDs to profiles; decorators wrap any source:

    ParallelProfileService(
        CacheForwardingService(
            CombinedProfileService(HashMapService(), HttpRepositoryService.for_minecraft()),
            cache,
        ),
        4,
    )
"""

from __future__ import annotations

from .cache_forwarding import CacheForwardingService
from .cache_lookup import CacheLookupService
from .combined import CombinedProfileService, LookupProgress
from .hash_map_service import HashMapService
from .host_registry import HostPlayerService, PlayerRegistry
from .http_repository import MAX_NAMES_PER_REQUEST, HttpRepositoryService
from .parallel import ParallelProfileService
from .preferred_cached import PreferredCachedService
from .single_request import SingleRequestService

__all__ = [
    "MAX_NAMES_PER_REQUEST",
    "CacheForwardingService",
    "CacheLookupService",
    "CombinedProfileService",
    "HashMapService",
    "HostPlayerService",
    "HttpRepositoryService",
    "LookupProgress",
    "ParallelProfileService",
    "PlayerRegistry",
    "PreferredCachedService",
    "SingleRequestService",
]
