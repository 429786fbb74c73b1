"""Base class for sources that resolve one key at a time.

Local maps, cache views and host registries only implement the single-key
lookups; batch and streaming lookups are derived here by looping."""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from ..core.interfaces import MAX_REQUEST_LIMIT, ProfileService, ProfileVisitor, should_stop
from ..core.models import Profile
from ..shared import unique


class SingleRequestService(ProfileService):
    """Derives batch and streaming lookups from ``find_by_name``/``find_by_uuid``"""

    @property
    def ideal_request_limit(self) -> int:
        return MAX_REQUEST_LIMIT

    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        profiles: list[Profile] = []
        for name in unique(names):
            profile = self.find_by_name(name)
            if profile is not None:
                profiles.append(profile)
        return profiles

    def visit_all_by_name(self, names: Iterable[str], visitor: ProfileVisitor) -> None:
        for name in unique(names):
            profile = self.find_by_name(name)
            if profile is not None and should_stop(visitor(profile)):
                return

    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        profiles: list[Profile] = []
        for unique_id in unique(unique_ids):
            profile = self.find_by_uuid(unique_id)
            if profile is not None:
                profiles.append(profile)
        return profiles

    def visit_all_by_uuid(self, unique_ids: Iterable[uuid.UUID], visitor: ProfileVisitor) -> None:
        for unique_id in unique(unique_ids):
            profile = self.find_by_uuid(unique_id)
            if profile is not None and should_stop(visitor(profile)):
                return
