"""Source that prefers live and cached answers over remote lookups."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from typing import TypeVar

from ..core.interfaces import ProfileCache, ProfileService
from ..core.models import Profile
from ..shared import unique
from .cache_forwarding import CacheForwardingService
from .cache_lookup import CacheLookupService

logger = logging.getLogger(__name__)

K = TypeVar("K")


class PreferredCachedService(CacheForwardingService):
    """Answers from a preferred source, then the cache, then the resolver.

    The preferred source is typically a ``HostPlayerService`` of players who
    are online right now. Profiles from the preferred source and from the
    resolver are written to the cache; cache hits are returned as they are.
    Streaming lookups go straight to the resolver, with cache writes.
    """

    def __init__(self, resolver: ProfileService, cache: ProfileCache, preferred: ProfileService | None = None):
        super().__init__(resolver, cache)
        self.preferred = preferred
        self._cached = CacheLookupService(cache)

    def find_by_name(self, name: str) -> Profile | None:
        return self._find_one(name, lambda service, key: service.find_by_name(key))

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        return self._find_one(unique_id, lambda service, key: service.find_by_uuid(key))

    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        return self._find_all(
            unique(names),
            lambda profile: profile.name,
            lambda service, keys: service.find_all_by_name(keys),
        )

    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        return self._find_all(
            unique(unique_ids),
            lambda profile: profile.unique_id,
            lambda service, keys: service.find_all_by_uuid(keys),
        )

    def _find_one(self, key: K, lookup: Callable[[ProfileService, K], Profile | None]) -> Profile | None:
        if self.preferred is not None:
            profile = lookup(self.preferred, key)
            if profile is not None:
                self._store([profile])
                return profile

        cached = lookup(self._cached, key)
        if cached is not None:
            return cached

        profile = lookup(self.resolver, key)
        if profile is not None:
            self._store([profile])
        return profile

    def _find_all(
        self,
        keys: list[K],
        key_of: Callable[[Profile], K],
        lookup: Callable[[ProfileService, list[K]], list[Profile]],
    ) -> list[Profile]:
        missing = list(keys)
        results: list[Profile] = []

        def take(found: list[Profile]) -> None:
            nonlocal missing
            found_keys = {key_of(profile) for profile in found}
            results.extend(found)
            missing = [key for key in missing if key not in found_keys]

        if self.preferred is not None and missing:
            online = lookup(self.preferred, missing)
            self._store(online)
            take(online)

        if missing:
            take(lookup(self._cached, missing))

        if missing:
            looked_up = lookup(self.resolver, missing)
            self._store(looked_up)
            take(looked_up)

        logger.debug(f"Resolved {len(results)} profiles, {len(missing)} keys not found")
        return unique(results)
