"""Lookup source that reads from a profile cache."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from ..core.interfaces import NameLookupCache, ProfileCache, supports_name_lookup
from ..core.models import Profile
from ..errors import ConfigurationError
from ..shared import unique
from .single_request import SingleRequestService

logger = logging.getLogger(__name__)


class CacheLookupService(SingleRequestService):
    """Serves profiles already held in a cache.

    Lookup by UUID always works. Lookup by name only works when the cache
    supports reverse lookup; otherwise names are reported as unknown so a
    combined source falls through to the next member.
    """

    def __init__(self, cache: ProfileCache):
        if cache is None:
            raise ConfigurationError("cache is required")
        self.cache = cache
        self._name_cache: NameLookupCache | None = cache if supports_name_lookup(cache) else None  # type: ignore[assignment]
        if self._name_cache is None:
            logger.debug(f"{type(cache).__name__} has no name index; name lookups will fall through")

    @property
    def supports_names(self) -> bool:
        return self._name_cache is not None

    def find_by_name(self, name: str) -> Profile | None:
        if self._name_cache is None:
            return None
        return self._name_cache.get_if_present_by_name(name)

    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        if self._name_cache is None:
            return []
        return list(self._name_cache.get_all_present_by_name(unique(names)).values())

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        return self.cache.get_if_present(unique_id)

    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        return list(self.cache.get_all_present(unique(unique_ids)).values())
