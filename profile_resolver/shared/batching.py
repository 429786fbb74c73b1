"""Helpers for splitting and de-duplicating lookup batches."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator
from itertools import islice
from typing import TypeVar

from ..errors import ConfigurationError

T = TypeVar("T")


def partition(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive lists of at most ``size`` items.

    The last list may be shorter. An empty input yields nothing.
    """
    if size < 1:
        raise ConfigurationError(f"partition size must be >= 1, got {size}")
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk


def unique(items: Iterable[T], key: Callable[[T], Hashable] | None = None) -> list[T]:
    """Drop repeated items, keeping the first occurrence and the input order."""
    seen: set[Hashable] = set()
    result: list[T] = []
    for item in items:
        marker = key(item) if key else item
        if marker not in seen:
            seen.add(marker)
            result.append(item)
    return result
