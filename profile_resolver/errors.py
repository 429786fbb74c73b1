"""Resolver error classes.

Transient I/O failures are not wrapped: they surface as ``OSError``
(``requests.RequestException`` is one) so callers can catch them directly.
"""

from __future__ import annotations


class ResolverError(Exception):
    """Base exception for profile resolution errors."""

    pass


class ConfigurationError(ResolverError, ValueError):
    """Raised when a service or cache is configured with an invalid argument."""

    pass


class LookupCancelledError(ResolverError):
    """Raised when a blocking wait is interrupted by a cancellation event."""

    pass


class ProfileServiceError(ResolverError):
    """Raised when a parallel lookup job fails with a non-I/O error."""

    pass


class CacheError(ResolverError):
    """Raised by cache storage internals.

    Never escapes a cache's public put/get methods after construction.
    """

    pass
