"""Abstract interfaces for lookup sources and caches.

These define the contracts that every source, decorator and cache follows,
so any of them can be composed with any other."""

from __future__ import annotations

import sys
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from .models import Profile

# Advised limit for sources with no per-call batch cost
MAX_REQUEST_LIMIT = sys.maxsize

# Receives one resolved profile; returning False asks the source to stop early.
# Stopping is advisory: a source may keep going but must not fail on it.
ProfileVisitor = Callable[[Profile], bool | None]


def should_stop(result: bool | None) -> bool:
    """Interpret a visitor's return value (only an explicit False stops)"""
    return result is False


class ProfileService(ABC):
    """Resolves names and UUIDs into profiles"""

    @property
    @abstractmethod
    def ideal_request_limit(self) -> int:
        """Largest number of keys this source resolves efficiently in one call.

        Batch methods may split larger requests themselves; this is advice
        for callers that partition work up front.
        """
        pass

    @abstractmethod
    def find_by_name(self, name: str) -> Profile | None:
        """Find the profile for a name, or None if this source doesn't know it"""
        pass

    @abstractmethod
    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        """Find profiles for the given names.

        Returns only the names that could be resolved, in no particular order,
        with at most one profile per distinct name.
        """
        pass

    @abstractmethod
    def visit_all_by_name(self, names: Iterable[str], visitor: ProfileVisitor) -> None:
        """Resolve names progressively, passing each profile to the visitor"""
        pass

    @abstractmethod
    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        """Find the profile for a UUID, or None if this source doesn't know it"""
        pass

    @abstractmethod
    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        """Find profiles for the given UUIDs"""
        pass

    @abstractmethod
    def visit_all_by_uuid(self, unique_ids: Iterable[uuid.UUID], visitor: ProfileVisitor) -> None:
        """Resolve UUIDs progressively, passing each profile to the visitor"""
        pass


class ProfileCache(ABC):
    """Best-effort store of last-known profiles keyed by UUID.

    Implementations must never raise from these methods: storage failures
    are logged and turned into a no-op or an empty result.
    """

    @abstractmethod
    def put(self, profile: Profile) -> None:
        """Store a profile, replacing any name held for its UUID"""
        pass

    @abstractmethod
    def put_all(self, profiles: Iterable[Profile]) -> None:
        """Store several profiles"""
        pass

    @abstractmethod
    def get_if_present(self, unique_id: uuid.UUID) -> Profile | None:
        """Get the cached profile for a UUID, if any"""
        pass

    @abstractmethod
    def get_all_present(self, unique_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, Profile]:
        """Get cached profiles; UUIDs without an entry are omitted"""
        pass


@runtime_checkable
class NameLookupCache(Protocol):
    """Optional cache capability: reverse lookup by name"""

    def get_if_present_by_name(self, name: str) -> Profile | None:
        """Get the cached profile currently holding a name, if any"""
        ...

    def get_all_present_by_name(self, names: Iterable[str]) -> dict[str, Profile]:
        """Get cached profiles by name; unknown names are omitted"""
        ...


def supports_name_lookup(cache: object) -> bool:
    """Check whether a cache offers reverse lookup by name"""
    return isinstance(cache, NameLookupCache)
