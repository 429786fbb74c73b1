"""In-memory profile cache with reverse lookup by name."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Iterable

from ..core.models import Profile
from .base import AbstractProfileCache


class HashMapCache(AbstractProfileCache):
    """Thread-safe bidirectional UUID <-> name map.

    Each UUID holds one current name and each name belongs to one UUID:
    storing a new name for a UUID forgets its old name, and storing a name
    already held by another UUID takes it away from that UUID.
    """

    def __init__(self) -> None:
        self._names_by_id: dict[uuid.UUID, str] = {}
        self._ids_by_name: dict[str, uuid.UUID] = {}
        self._lock = threading.RLock()

    def put_all(self, profiles: Iterable[Profile]) -> None:
        with self._lock:
            for profile in profiles:
                self._store(profile)

    def _store(self, profile: Profile) -> None:
        old_name = self._names_by_id.get(profile.unique_id)
        if old_name is not None and old_name != profile.name:
            del self._ids_by_name[old_name]

        previous_owner = self._ids_by_name.get(profile.name)
        if previous_owner is not None and previous_owner != profile.unique_id:
            del self._names_by_id[previous_owner]

        self._names_by_id[profile.unique_id] = profile.name
        self._ids_by_name[profile.name] = profile.unique_id

    def get_all_present(self, unique_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, Profile]:
        results: dict[uuid.UUID, Profile] = {}
        with self._lock:
            for unique_id in unique_ids:
                name = self._names_by_id.get(unique_id)
                if name is not None:
                    results[unique_id] = Profile(unique_id, name)
        return results

    def get_if_present_by_name(self, name: str) -> Profile | None:
        return self.get_all_present_by_name([name]).get(name)

    def get_all_present_by_name(self, names: Iterable[str]) -> dict[str, Profile]:
        results: dict[str, Profile] = {}
        with self._lock:
            for name in names:
                unique_id = self._ids_by_name.get(name)
                if unique_id is not None:
                    results[name] = Profile(unique_id, name)
        return results

    def __len__(self) -> int:
        with self._lock:
            return len(self._names_by_id)
