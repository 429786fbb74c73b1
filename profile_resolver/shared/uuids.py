"""UUID text normalization.

The remote service exchanges ids without dashes; profiles and caches always
use the canonical dashed form."""

from __future__ import annotations

import re
import uuid

_DASHLESS_PATTERN = re.compile(r"^([A-Fa-f0-9]{8})([A-Fa-f0-9]{4})([A-Fa-f0-9]{4})([A-Fa-f0-9]{4})([A-Fa-f0-9]{12})$")


def add_dashes(text: str) -> str:
    """Return the canonical 8-4-4-4-12 form of a dashed or dashless UUID.

    Raises:
        ValueError: if the text is not 32 hex digits once dashes are removed
    """
    match = _DASHLESS_PATTERN.match(text.replace("-", ""))
    if not match:
        raise ValueError(f"Invalid UUID format: {text!r}")
    return "-".join(match.groups())


def strip_dashes(text: str) -> str:
    """Return the 32-hex-digit form of a dashed or dashless UUID.

    Raises:
        ValueError: if the text is not a valid UUID
    """
    dashless = text.replace("-", "")
    if not _DASHLESS_PATTERN.match(dashless):
        raise ValueError(f"Invalid UUID format: {text!r}")
    return dashless


def parse_uuid(text: str) -> uuid.UUID:
    """Parse a dashed or dashless UUID string."""
    return uuid.UUID(add_dashes(text))
