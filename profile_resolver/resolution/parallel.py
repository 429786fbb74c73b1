"""Decorator that spreads batch lookups over a thread pool."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import FIRST_COMPLETED, Executor, Future, ThreadPoolExecutor, as_completed, wait
from typing import TypeVar

from ..core.interfaces import ProfileService, ProfileVisitor
from ..core.models import Profile
from ..errors import ConfigurationError, LookupCancelledError, ProfileServiceError, ResolverError
from ..shared import partition, unique

logger = logging.getLogger(__name__)

K = TypeVar("K")
T = TypeVar("T")

DEFAULT_THREADS = 4
DEFAULT_PROFILES_PER_JOB = 100

# How often a wait for jobs checks the cancel event, in seconds
CANCEL_POLL_INTERVAL = 0.05


class ParallelProfileService(ProfileService):
    """Resolves large batches with several parallel jobs using another source.

    Batches are split into jobs of at most
    ``min(profiles_per_job, resolver.ideal_request_limit)`` keys. Results are
    collected in completion order. Single-key lookups are not parallelized.

    Visitors passed to the streaming methods are called from worker threads
    and must be thread-safe.
    """

    def __init__(
        self,
        resolver: ProfileService,
        executor: Executor | int = DEFAULT_THREADS,
        *,
        profiles_per_job: int = DEFAULT_PROFILES_PER_JOB,
        cancel_event: threading.Event | None = None,
    ):
        """Initialize the decorator.

        Args:
            resolver: Source that performs the lookups
            executor: Executor to run jobs in, or a number of threads for a new pool
            profiles_per_job: Upper bound of keys per job
            cancel_event: When set, aborts waiting for jobs with LookupCancelledError
        """
        if resolver is None:
            raise ConfigurationError("resolver is required")
        self.resolver = resolver

        if isinstance(executor, int):
            if executor < 1:
                raise ConfigurationError(f"number of threads must be >= 1, got {executor}")
            self.executor: Executor = ThreadPoolExecutor(max_workers=executor, thread_name_prefix="profile-lookup")
            self._owns_executor = True
        elif executor is None:
            raise ConfigurationError("executor is required")
        else:
            self.executor = executor
            self._owns_executor = False

        self.profiles_per_job = profiles_per_job
        self.cancel_event = cancel_event

    @property
    def profiles_per_job(self) -> int:
        """Upper bound number of keys resolved per job"""
        return self._profiles_per_job

    @profiles_per_job.setter
    def profiles_per_job(self, value: int) -> None:
        if value < 1:
            raise ConfigurationError(f"profiles_per_job must be >= 1, got {value}")
        self._profiles_per_job = value

    @property
    def effective_profiles_per_job(self) -> int:
        return min(self.profiles_per_job, self.resolver.ideal_request_limit)

    @property
    def ideal_request_limit(self) -> int:
        return self.resolver.ideal_request_limit

    def find_by_name(self, name: str) -> Profile | None:
        return self.resolver.find_by_name(name)

    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        results = self._run_jobs(unique(names), self.resolver.find_all_by_name)
        return unique(profile for profiles in results for profile in profiles)

    def visit_all_by_name(self, names: Iterable[str], visitor: ProfileVisitor) -> None:
        self._run_jobs(unique(names), lambda chunk: self.resolver.visit_all_by_name(chunk, visitor))

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        return self.resolver.find_by_uuid(unique_id)

    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        results = self._run_jobs(unique(unique_ids), self.resolver.find_all_by_uuid)
        return unique(profile for profiles in results for profile in profiles)

    def visit_all_by_uuid(self, unique_ids: Iterable[uuid.UUID], visitor: ProfileVisitor) -> None:
        self._run_jobs(unique(unique_ids), lambda chunk: self.resolver.visit_all_by_uuid(chunk, visitor))

    def _run_jobs(self, keys: list[K], job: Callable[[list[K]], T]) -> list[T]:
        """Submit one job per chunk and wait for all of them.

        The first failure seen is raised after every job has finished;
        I/O and resolver errors keep their type, anything else is wrapped
        in ProfileServiceError.
        """
        futures = [self.executor.submit(job, chunk) for chunk in partition(keys, self.effective_profiles_per_job)]
        logger.debug(f"Submitted {len(futures)} lookup jobs for {len(keys)} keys")

        results: list[T] = []
        error: BaseException | None = None
        try:
            for future in self._completed(futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    if error is None:
                        error = e
                    else:
                        logger.debug(f"Additional lookup job failure ignored: {e}")
        except BaseException:
            for future in futures:
                future.cancel()
            raise

        if error is not None:
            if isinstance(error, (OSError, ResolverError)):
                raise error
            raise ProfileServiceError("Error occurred during the parallel lookup") from error
        return results

    def _completed(self, futures: list[Future[T]]) -> Iterator[Future[T]]:
        if self.cancel_event is None:
            yield from as_completed(futures)
            return

        pending: set[Future[T]] = set(futures)
        while pending:
            if self.cancel_event.is_set():
                raise LookupCancelledError("Lookup cancelled while waiting for parallel jobs")
            done, pending = wait(pending, timeout=CANCEL_POLL_INTERVAL, return_when=FIRST_COMPLETED)
            yield from done

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the thread pool if this service created it"""
        if self._owns_executor:
            self.executor.shutdown(wait=wait)

    def __enter__(self) -> ParallelProfileService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
