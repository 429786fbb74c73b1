"""Shared utilities module."""

from __future__ import annotations

from .batching import partition, unique
from .uuids import add_dashes, parse_uuid, strip_dashes

__all__ = [
    "add_dashes",
    "parse_uuid",
    "partition",
    "strip_dashes",
    "unique",
]
