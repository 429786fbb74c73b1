"""Lookup source backed by in-process dictionaries."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Iterable, Mapping

from ..core.models import Profile
from .single_request import SingleRequestService


class HashMapService(SingleRequestService):
    """Resolves profiles from a fixed or programmatically filled mapping.

    Useful for pinning known names ahead of a remote source in a
    ``CombinedProfileService``.
    """

    def __init__(self, mapping: Mapping[str, uuid.UUID] | None = None):
        """Initialize the service.

        Args:
            mapping: Optional initial name -> UUID entries
        """
        self._ids_by_name: dict[str, uuid.UUID] = {}
        self._names_by_id: dict[uuid.UUID, str] = {}
        self._lock = threading.Lock()

        if mapping:
            self.put_all(Profile(unique_id, name) for name, unique_id in mapping.items())

    def put(self, profile: Profile) -> None:
        """Add a profile to the map"""
        with self._lock:
            self._ids_by_name[profile.name] = profile.unique_id
            self._names_by_id[profile.unique_id] = profile.name

    def put_all(self, profiles: Iterable[Profile]) -> None:
        """Add several profiles to the map"""
        for profile in profiles:
            self.put(profile)

    def find_by_name(self, name: str) -> Profile | None:
        with self._lock:
            unique_id = self._ids_by_name.get(name)
        return Profile(unique_id, name) if unique_id is not None else None

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        with self._lock:
            name = self._names_by_id.get(unique_id)
        return Profile(unique_id, name) if name is not None else None
