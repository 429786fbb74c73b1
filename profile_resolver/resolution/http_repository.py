"""Remote profile lookups against a Mojang-style HTTP profile API.

Name lookups go to a batch endpoint that accepts up to 100 names per POST.
UUID lookups go to a per-id name history endpoint whose last entry is the
current name. Every request retries transient failures with exponential
backoff before giving up."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Iterable
from typing import Any

import requests

from ..core.interfaces import ProfileService, ProfileVisitor, should_stop
from ..core.models import Profile
from ..errors import ConfigurationError, LookupCancelledError
from ..logging_config import TRACE
from ..shared import parse_uuid, partition, strip_dashes, unique

logger = logging.getLogger(__name__)

MINECRAFT_AGENT = "minecraft"

# Protocol limit of the batch profiles endpoint
MAX_NAMES_PER_REQUEST = 100

DEFAULT_PROFILES_URL = "https://api.mojang.com/profiles/{agent}"
DEFAULT_NAME_HISTORY_URL = "https://api.mojang.com/user/profiles/{uuid}/names"

DEFAULT_MAX_RETRIES = 5
DEFAULT_RETRY_DELAY = 0.05  # seconds, doubled after every failed attempt
DEFAULT_TIMEOUT = 10.0


def decode_profile(entry: Any) -> Profile | None:
    """Decode one ``{"id": ..., "name": ...}`` record from the batch endpoint.

    Returns None (and logs) for records that are not usable.
    """
    if not isinstance(entry, dict):
        logger.warning(f"Got invalid value from profile lookup service: {entry!r}")
        return None

    raw_id = entry.get("id")
    raw_name = entry.get("name")
    if raw_id is None or raw_name is None:
        logger.warning(f"Skipping profile record without id or name: {entry!r}")
        return None

    try:
        return Profile(parse_uuid(str(raw_id)), str(raw_name))
    except ValueError as e:
        logger.warning(f"Got invalid value from profile lookup service: {entry!r} ({e})")
        return None


def decode_name_history(entries: Any, unique_id: uuid.UUID) -> Profile | None:
    """Build a profile from a name history, using the most recent valid name."""
    if not isinstance(entries, list):
        logger.warning(f"Got invalid name history for {unique_id}: {entries!r}")
        return None

    latest: Profile | None = None
    for entry in entries:
        raw_name = entry.get("name") if isinstance(entry, dict) else None
        if raw_name is None:
            logger.warning(f"Skipping name history record without name for {unique_id}: {entry!r}")
            continue
        try:
            latest = Profile(unique_id, str(raw_name))
        except ValueError as e:
            logger.warning(f"Got invalid value from name history service for {unique_id}: {entry!r} ({e})")
    return latest


class HttpRepositoryService(ProfileService):
    """Resolves names and UUIDs in bulk using the remote profile API.

    The agent selects the game whose accounts are searched; a wrong agent
    returns no (or wrong) results.
    """

    def __init__(
        self,
        agent: str = MINECRAFT_AGENT,
        *,
        profiles_url: str | None = None,
        name_history_url: str | None = None,
        session: requests.Session | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float | None = DEFAULT_TIMEOUT,
        cancel_event: threading.Event | None = None,
    ):
        """Initialize the client.

        Args:
            agent: Game agent used in the default profiles URL
            profiles_url: Batch name lookup endpoint (overrides the agent URL)
            name_history_url: Per-id endpoint template containing ``{uuid}``
            session: requests session to use (one is created if omitted)
            max_retries: Retries per request after the first attempt
            retry_delay: Seconds to wait after the first failure, doubling each time
            timeout: Socket timeout per request in seconds (None waits forever)
            cancel_event: When set, aborts any backoff wait with LookupCancelledError
        """
        if not agent:
            raise ConfigurationError("agent is required")

        self.agent = agent
        self.profiles_url = profiles_url or DEFAULT_PROFILES_URL.format(agent=agent)
        self.name_history_url = name_history_url or DEFAULT_NAME_HISTORY_URL
        if "{uuid}" not in self.name_history_url:
            raise ConfigurationError(f"name_history_url must contain '{{uuid}}': {self.name_history_url}")

        self.session = session or requests.Session()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        if timeout is not None and timeout <= 0:
            raise ConfigurationError(f"timeout must be > 0, got {timeout}")
        self.timeout = timeout
        self.cancel_event = cancel_event

    @classmethod
    def for_minecraft(cls, **kwargs: Any) -> HttpRepositoryService:
        """Create a client for Minecraft accounts"""
        return cls(MINECRAFT_AGENT, **kwargs)

    @property
    def max_retries(self) -> int:
        """Maximum number of retries per HTTP request"""
        return self._max_retries

    @max_retries.setter
    def max_retries(self, value: int) -> None:
        if value < 0:
            raise ConfigurationError(f"max_retries must be >= 0, got {value}")
        self._max_retries = value

    @property
    def retry_delay(self) -> float:
        """Seconds to wait after the first failed request, doubling each retry"""
        return self._retry_delay

    @retry_delay.setter
    def retry_delay(self, value: float) -> None:
        if value < 0:
            raise ConfigurationError(f"retry_delay must be >= 0, got {value}")
        self._retry_delay = value

    @property
    def ideal_request_limit(self) -> int:
        return MAX_NAMES_PER_REQUEST

    def find_by_name(self, name: str) -> Profile | None:
        profiles = self.find_all_by_name([name])
        return profiles[0] if profiles else None

    def find_all_by_name(self, names: Iterable[str]) -> list[Profile]:
        profiles: list[Profile] = []
        for chunk in partition(unique(names), MAX_NAMES_PER_REQUEST):
            profiles.extend(self.query_by_name(chunk))
        return unique(profiles)

    def visit_all_by_name(self, names: Iterable[str], visitor: ProfileVisitor) -> None:
        for chunk in partition(unique(names), MAX_NAMES_PER_REQUEST):
            for profile in self.query_by_name(chunk):
                if should_stop(visitor(profile)):
                    return

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        return self.query_by_uuid(unique_id)

    def find_all_by_uuid(self, unique_ids: Iterable[uuid.UUID]) -> list[Profile]:
        profiles: list[Profile] = []
        for unique_id in unique(unique_ids):
            profile = self.query_by_uuid(unique_id)
            if profile is not None:
                profiles.append(profile)
        return profiles

    def visit_all_by_uuid(self, unique_ids: Iterable[uuid.UUID], visitor: ProfileVisitor) -> None:
        for unique_id in unique(unique_ids):
            profile = self.query_by_uuid(unique_id)
            if profile is not None and should_stop(visitor(profile)):
                return

    def query_by_name(self, names: list[str]) -> list[Profile]:
        """Look up one batch of names without partitioning it.

        Raises:
            requests.RequestException: if every attempt failed
        """
        if not names:
            return []

        logger.log(TRACE, f"POST {self.profiles_url} names={names}")
        result = self._request_json("POST", self.profiles_url, "profile lookup service", json=names)

        if not isinstance(result, list):
            logger.warning(f"Unexpected response from profile lookup service: {type(result).__name__}")
            return []

        profiles = [profile for profile in map(decode_profile, result) if profile is not None]
        logger.debug(f"Resolved {len(profiles)}/{len(names)} names from {self.profiles_url}")
        return profiles

    def query_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        """Look up the current name of one UUID via its name history.

        Raises:
            requests.RequestException: if every attempt failed
        """
        url = self.name_history_url.format(uuid=strip_dashes(str(unique_id)))
        logger.log(TRACE, f"GET {url}")
        result = self._request_json("GET", url, "name history service")
        return decode_name_history(result, unique_id)

    def _request_json(self, method: str, url: str, description: str, **kwargs: Any) -> Any:
        """Perform a request with retries and return the decoded JSON body.

        An empty body (e.g. 204 No Content for an unknown id) decodes to [].
        """
        retries_left = self.max_retries
        delay = self.retry_delay

        while True:
            try:
                response = self.session.request(method, url, timeout=self.timeout, **kwargs)
                response.raise_for_status()
                if response.status_code == 204 or not response.content:
                    return []
                return response.json()
            except requests.RequestException as e:
                if retries_left == 0:
                    logger.error(f"Failed to query {description} after {self.max_retries} retries: {e}")
                    raise

                logger.warning(
                    f"Failed to query {description} -- retrying in {delay:.3f}s ({retries_left} retries left)",
                    exc_info=True,
                )
                self._sleep(delay)

            delay *= 2
            retries_left -= 1

    def _sleep(self, delay: float) -> None:
        if self.cancel_event is None:
            time.sleep(delay)
        elif self.cancel_event.wait(delay):
            raise LookupCancelledError("Lookup cancelled while waiting to retry")
