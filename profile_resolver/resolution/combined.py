"""Priority-ordered combination of lookup sources.

Sources are asked in order, each only for the keys that are still missing,
and the remaining sources are skipped once every key has been found."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import Generic, TypeVar

from ..core.interfaces import MAX_REQUEST_LIMIT, ProfileService, ProfileVisitor, should_stop
from ..core.models import Profile
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

K = TypeVar("K")


class LookupProgress(Generic[K]):
    """Thread-safe record of which requested keys are still missing.

    Shared by every stage of one combined lookup. Keys are compared through
    ``normalize`` so the case policy applies to both requests and results.
    """

    def __init__(self, keys: Iterable[K], normalize: Callable[[K], Hashable]):
        self._normalize = normalize
        self._lock = threading.Lock()
        self._missing: dict[Hashable, K] = {}
        self._reported: set[Hashable] = set()
        self._stop_requested = False
        for key in keys:
            self._missing.setdefault(normalize(key), key)

    def missing(self) -> list[K]:
        """Snapshot of the keys not found yet, in request order"""
        with self._lock:
            return list(self._missing.values())

    def is_complete(self) -> bool:
        with self._lock:
            return not self._missing

    def mark_found(self, key: K) -> bool:
        """Record a resolved key.

        Returns False if the key was already reported by an earlier stage,
        in which case the profile must not be passed on again.
        """
        normalized = self._normalize(key)
        with self._lock:
            if normalized in self._reported:
                return False
            self._reported.add(normalized)
            self._missing.pop(normalized, None)
            return True

    def request_stop(self) -> None:
        with self._lock:
            self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        with self._lock:
            return self._stop_requested


def forwarding_visitor(
    progress: LookupProgress[K],
    key_of: Callable[[Profile], K],
    visitor: ProfileVisitor,
) -> ProfileVisitor:
    """Wrap a caller's visitor so each key is reported once and marked found."""

    def forward(profile: Profile) -> bool | None:
        if not progress.mark_found(key_of(profile)):
            return True
        result = visitor(profile)
        if should_stop(result):
            progress.request_stop()
        return result

    return forward


def _name_of(profile: Profile) -> str:
    return profile.name


def _uuid_of(profile: Profile) -> uuid.UUID:
    return profile.unique_id


def _same_uuid(unique_id: uuid.UUID) -> Hashable:
    return unique_id


class CombinedProfileService(ProfileService):
    """Checks several sources from first to last.

    Stops when there are no sources left or every key was found. With no
    sources at all, every lookup simply finds nothing.
    """

    def __init__(self, *services: ProfileService | Sequence[ProfileService], case_sensitive: bool = False):
        """Initialize with sources in priority order.

        Args:
            services: Sources, given as arguments or as a single list
            case_sensitive: Whether names differing only in case are different keys
        """
        if len(services) == 1 and isinstance(services[0], Sequence):
            services = tuple(services[0])
        for service in services:
            if not isinstance(service, ProfileService):
                raise ConfigurationError(f"{type(service).__name__} is not a ProfileService")
        self.services: tuple[ProfileService, ...] = tuple(services)  # type: ignore[arg-type]
        self.case_sensitive = case_sensitive

    def _normalize_name(self, name: str) -> Hashable:
        return name if self.case_sensitive else name.casefold()

    @property
    def ideal_request_limit(self) -> int:
        return min((service.ideal_request_limit for service in self.services), default=MAX_REQUEST_LIMIT)

    def find_by_name(self, name: str) -> Profile | None:
        for service in self.services:
            profile = service.find_by_name(name)
            if profile is not None:
                return profile
        return None

    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        progress = LookupProgress(names, self._normalize_name)
        return self._find_all(progress, _name_of, lambda service, keys: service.find_all_by_name(keys))

    def visit_all_by_name(self, names: Iterable[str], visitor: ProfileVisitor) -> None:
        progress = LookupProgress(names, self._normalize_name)
        forward = forwarding_visitor(progress, _name_of, visitor)
        self._visit_all(progress, lambda service, keys: service.visit_all_by_name(keys, forward))

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        for service in self.services:
            profile = service.find_by_uuid(unique_id)
            if profile is not None:
                return profile
        return None

    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        progress = LookupProgress(unique_ids, _same_uuid)
        return self._find_all(progress, _uuid_of, lambda service, keys: service.find_all_by_uuid(keys))

    def visit_all_by_uuid(self, unique_ids: Iterable[uuid.UUID], visitor: ProfileVisitor) -> None:
        progress = LookupProgress(unique_ids, _same_uuid)
        forward = forwarding_visitor(progress, _uuid_of, visitor)
        self._visit_all(progress, lambda service, keys: service.visit_all_by_uuid(keys, forward))

    def _find_all(
        self,
        progress: LookupProgress[K],
        key_of: Callable[[Profile], K],
        query: Callable[[ProfileService, list[K]], list[Profile]],
    ) -> list[Profile]:
        results: list[Profile] = []
        for service in self.services:
            if progress.is_complete():
                break
            missing = progress.missing()
            found = query(service, missing)
            for profile in found:
                if progress.mark_found(key_of(profile)):
                    results.append(profile)
            logger.debug(f"{type(service).__name__} resolved {len(found)}/{len(missing)} keys")
        return results

    def _visit_all(
        self,
        progress: LookupProgress[K],
        query: Callable[[ProfileService, list[K]], None],
    ) -> None:
        for service in self.services:
            if progress.is_complete() or progress.stop_requested:
                break
            query(service, progress.missing())
