"""Base class deriving single-key cache operations from batch ones."""

from __future__ import annotations

import uuid

from ..core.interfaces import ProfileCache
from ..core.models import Profile


class AbstractProfileCache(ProfileCache):
    """Cache that only needs ``put_all`` and ``get_all_present``"""

    def put(self, profile: Profile) -> None:
        self.put_all([profile])

    def get_if_present(self, unique_id: uuid.UUID) -> Profile | None:
        return self.get_all_present([unique_id]).get(unique_id)
