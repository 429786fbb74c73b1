"""
ProfilePipeline - assembles the default resolution pipeline from settings.

The default chain is:

    ParallelProfileService
      -> CacheForwardingService (writes every result to the cache)
        -> CombinedProfileService
             [host registry (when detected), cache, local map, remote HTTP API]

Usage as context manager:
    with ProfilePipeline.from_settings() as pipeline:
        profiles = pipeline.service.find_all_by_name(["Notch", "jeb_"])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from .cache import HashMapCache, SQLiteCache
from .core.interfaces import ProfileCache, ProfileService
from .resolution import (
    CacheForwardingService,
    CacheLookupService,
    CombinedProfileService,
    HashMapService,
    HostPlayerService,
    HttpRepositoryService,
    ParallelProfileService,
)
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class ProfilePipeline:
    """The assembled service plus the parts callers may want to reach"""

    service: ParallelProfileService
    cache: ProfileCache
    local: HashMapService
    remote: HttpRepositoryService
    host: HostPlayerService | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        cache: ProfileCache | None = None,
        session: requests.Session | None = None,
    ) -> ProfilePipeline:
        """Build the default pipeline.

        Args:
            settings: Settings to use (defaults to get_settings())
            cache: Cache to use instead of the one named by settings
            session: requests session for the remote client

        Raises:
            CacheError: if the configured SQLite cache can't be opened
        """
        settings = settings or get_settings()

        remote = HttpRepositoryService(
            profiles_url=settings.profiles_url,
            name_history_url=settings.name_history_url,
            session=session,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            timeout=settings.request_timeout,
        )
        local = HashMapService()
        host = HostPlayerService.detect(settings.player_registry)

        opened: SQLiteCache | None = None
        if cache is None:
            if settings.cache_path:
                cache = opened = SQLiteCache(settings.cache_path)
            else:
                cache = HashMapCache()

        try:
            sources: list[ProfileService] = []
            if host is not None:
                sources.append(host)
            sources.extend([CacheLookupService(cache), local, remote])

            combined = CombinedProfileService(sources, case_sensitive=settings.case_sensitive_names)
            service = ParallelProfileService(
                CacheForwardingService(combined, cache),
                settings.parallel_threads,
                profiles_per_job=settings.profiles_per_job,
            )
        except Exception:
            if opened is not None:
                opened.close()
            raise

        logger.debug(
            f"Built profile pipeline with {len(sources)} sources, "
            f"{settings.parallel_threads} threads, cache={type(cache).__name__}"
        )
        return cls(service=service, cache=cache, local=local, remote=remote, host=host)

    def close(self) -> None:
        """Stop worker threads and close the cache if it holds a connection"""
        self.service.shutdown()
        if isinstance(self.cache, SQLiteCache):
            self.cache.close()

    def __enter__(self) -> ProfilePipeline:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def build_profile_service(settings: Settings | None = None) -> ProfileService:
    """Build the default pipeline and return only its outermost service."""
    return ProfilePipeline.from_settings(settings).service
