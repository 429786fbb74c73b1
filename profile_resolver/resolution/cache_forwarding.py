"""Decorator that stores every resolved profile in a cache."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from ..core.interfaces import ProfileCache, ProfileService, ProfileVisitor
from ..core.models import Profile
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class CacheForwardingService(ProfileService):
    """Forwards lookups to a source and writes the results into a cache.

    The lookup result is returned unchanged; a failing cache write is logged
    and otherwise ignored.
    """

    def __init__(self, resolver: ProfileService, cache: ProfileCache):
        if resolver is None:
            raise ConfigurationError("resolver is required")
        if cache is None:
            raise ConfigurationError("cache is required")
        self.resolver = resolver
        self.cache = cache

    @property
    def ideal_request_limit(self) -> int:
        return self.resolver.ideal_request_limit

    def find_by_name(self, name: str) -> Profile | None:
        profile = self.resolver.find_by_name(name)
        if profile is not None:
            self._store([profile])
        return profile

    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        profiles = self.resolver.find_all_by_name(names)
        self._store(profiles)
        return profiles

    def visit_all_by_name(self, names: Iterable[str], visitor: ProfileVisitor) -> None:
        self.resolver.visit_all_by_name(names, self._caching_visitor(visitor))

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        profile = self.resolver.find_by_uuid(unique_id)
        if profile is not None:
            self._store([profile])
        return profile

    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        profiles = self.resolver.find_all_by_uuid(unique_ids)
        self._store(profiles)
        return profiles

    def visit_all_by_uuid(self, unique_ids: Iterable[uuid.UUID], visitor: ProfileVisitor) -> None:
        self.resolver.visit_all_by_uuid(unique_ids, self._caching_visitor(visitor))

    def _caching_visitor(self, visitor: ProfileVisitor) -> ProfileVisitor:
        def visit(profile: Profile) -> bool | None:
            self._store([profile])
            return visitor(profile)

        return visit

    def _store(self, profiles: list[Profile]) -> None:
        if not profiles:
            return
        try:
            self.cache.put_all(profiles)
        except Exception as e:
            logger.warning(f"Failed to add {len(profiles)} resolved profiles to the cache: {e}", exc_info=True)
