"""Core domain models for profile resolution.

These models represent the resolved identities and are independent of
any lookup source or storage backend."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace

from ..errors import ConfigurationError


@dataclass(frozen=True)
class Profile:
    """A pairing of a player's UUID and their current name.

    Two profiles are equal if they have the same UUID; the name is only the
    most recently observed label for that id.
    """

    unique_id: uuid.UUID
    name: str = field(compare=False)

    def __post_init__(self) -> None:
        """Validate both fields"""
        if not isinstance(self.unique_id, uuid.UUID):
            raise ConfigurationError(f"unique_id must be a UUID, got {type(self.unique_id).__name__}")
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError("name must be a non-empty string")

    def with_unique_id(self, unique_id: uuid.UUID) -> Profile:
        """Create a copy of this profile with a new UUID"""
        return replace(self, unique_id=unique_id)

    def with_name(self, name: str) -> Profile:
        """Create a copy of this profile with a new name"""
        return replace(self, name=name)

    def __str__(self) -> str:
        return f"{self.unique_id} {self.name}"
