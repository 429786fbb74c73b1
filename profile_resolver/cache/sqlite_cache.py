"""SQLite-backed persistent profile cache.

All access goes through one connection guarded by a lock; concurrent
callers are serialized here rather than racing on the connection.
Storage errors after construction are logged and never raised."""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from collections.abc import Iterable
from pathlib import Path

from ..core.models import Profile
from ..errors import CacheError
from ..shared import partition, unique
from .base import AbstractProfileCache

logger = logging.getLogger(__name__)

TABLE_NAME = "uuid_cache"

# Stay below SQLite's default bound-parameter limit
MAX_PARAMETERS_PER_QUERY = 500


class SQLiteCache(AbstractProfileCache):
    """Profile cache persisted to a SQLite file.

    A name is unique in the table: ``INSERT OR REPLACE`` removes any other
    row holding the same name, so reverse lookup returns one current UUID.
    """

    def __init__(self, path: str | Path, table_name: str = TABLE_NAME):
        """Open (or create) the cache file.

        Args:
            path: SQLite database file, or ":memory:"
            table_name: Table holding the cache entries

        Raises:
            CacheError: if the file can't be opened or the table can't be created
        """
        if not table_name or not table_name.isidentifier():
            raise CacheError(f"Invalid cache table name: {table_name!r}")

        self.path = str(path)
        self.table_name = table_name
        self._lock = threading.Lock()

        try:
            self._connection = sqlite3.connect(self.path, check_same_thread=False)
        except sqlite3.Error as e:
            raise CacheError(f"Failed to connect to cache file {self.path}") from e

        try:
            self._create_table()
        except sqlite3.Error as e:
            self._connection.close()
            raise CacheError(f"Failed to create cache table in {self.path}") from e

        logger.debug(f"Opened SQLite profile cache at {self.path}")

    def _create_table(self) -> None:
        with self._lock, self._connection:
            self._connection.execute(
                f"CREATE TABLE IF NOT EXISTS {self.table_name} (uuid CHAR(36) PRIMARY KEY NOT NULL, name CHAR(32) NOT NULL)"
            )
            self._connection.execute(
                f"CREATE UNIQUE INDEX IF NOT EXISTS {self.table_name}_name_index ON {self.table_name} (name)"
            )

    def put_all(self, profiles: Iterable[Profile]) -> None:
        try:
            self._execute_put(list(profiles))
        except sqlite3.Error as e:
            logger.warning(f"Failed to write profiles to {self.path}: {e}", exc_info=True)

    def get_all_present(self, unique_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, Profile]:
        try:
            return self._execute_get(unique([str(unique_id) for unique_id in unique_ids]))
        except sqlite3.Error as e:
            logger.warning(f"Failed to read profiles from {self.path}: {e}", exc_info=True)
            return {}

    def get_if_present_by_name(self, name: str) -> Profile | None:
        return self.get_all_present_by_name([name]).get(name)

    def get_all_present_by_name(self, names: Iterable[str]) -> dict[str, Profile]:
        try:
            profiles = self._execute_get_by_name(unique(names))
        except sqlite3.Error as e:
            logger.warning(f"Failed to read profiles by name from {self.path}: {e}", exc_info=True)
            return {}
        return {profile.name: profile for profile in profiles.values()}

    def _execute_put(self, profiles: list[Profile]) -> None:
        if not profiles:
            return
        rows = [(str(profile.unique_id), profile.name) for profile in profiles]
        with self._lock, self._connection:
            self._connection.executemany(
                f"INSERT OR REPLACE INTO {self.table_name} (uuid, name) VALUES (?, ?)",
                rows,
            )

    def _execute_get(self, keys: list[str]) -> dict[uuid.UUID, Profile]:
        return self._select("uuid", keys)

    def _execute_get_by_name(self, names: list[str]) -> dict[uuid.UUID, Profile]:
        return self._select("name", names)

    def _select(self, column: str, values: list[str]) -> dict[uuid.UUID, Profile]:
        results: dict[uuid.UUID, Profile] = {}
        for chunk in partition(values, MAX_PARAMETERS_PER_QUERY):
            placeholders = ", ".join("?" for _ in chunk)
            query = f"SELECT uuid, name FROM {self.table_name} WHERE {column} IN ({placeholders})"
            with self._lock:
                rows = self._connection.execute(query, chunk).fetchall()
            for raw_uuid, name in rows:
                profile = self._decode_row(raw_uuid, name)
                if profile is not None:
                    results[profile.unique_id] = profile
        return results

    def _decode_row(self, raw_uuid: str, name: str) -> Profile | None:
        try:
            return Profile(uuid.UUID(raw_uuid), name)
        except (ValueError, TypeError, AttributeError):
            logger.warning(f"Skipping malformed cache row in {self.path}: uuid={raw_uuid!r} name={name!r}")
            return None

    def close(self) -> None:
        """Close the underlying connection"""
        with self._lock:
            self._connection.close()

    def __enter__(self) -> SQLiteCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
