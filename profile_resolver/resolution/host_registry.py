"""Lookup source for players known to a host application.

A host (for example a game server embedding this library) can expose its
currently connected players. The registry is optional: when it can't be
found, ``HostPlayerService.detect`` returns None and pipelines are built
without it."""

from __future__ import annotations

import importlib
import logging
import uuid
from typing import Protocol, runtime_checkable

from ..core.models import Profile
from ..errors import ConfigurationError
from .single_request import SingleRequestService

logger = logging.getLogger(__name__)


@runtime_checkable
class PlayerRegistry(Protocol):
    """What a host application must provide about its players"""

    def get_player_id(self, name: str) -> uuid.UUID | None:
        """UUID of the player currently using a name, if known"""
        ...

    def get_player_name(self, unique_id: uuid.UUID) -> str | None:
        """Current name of the player with a UUID, if known"""
        ...


class HostPlayerService(SingleRequestService):
    """Resolves profiles from a host application's player registry"""

    def __init__(self, registry: PlayerRegistry):
        if not isinstance(registry, PlayerRegistry):
            raise ConfigurationError(f"{type(registry).__name__} does not implement PlayerRegistry")
        self.registry = registry

    @classmethod
    def detect(cls, import_path: str | None) -> HostPlayerService | None:
        """Load a registry from a ``module:attribute`` path if it is available.

        The attribute may be a registry or a zero-argument callable returning
        one. Returns None when the path is unset or can't be loaded.
        """
        if not import_path:
            return None

        module_name, _, attribute = import_path.partition(":")
        try:
            module = importlib.import_module(module_name)
            registry = getattr(module, attribute) if attribute else module
        except (ImportError, AttributeError) as e:
            logger.debug(f"Host player registry {import_path} not available: {e}")
            return None
        except Exception as e:
            logger.warning(f"Failed to load host player registry {import_path}: {e}", exc_info=True)
            return None

        if isinstance(registry, type) or (callable(registry) and not isinstance(registry, PlayerRegistry)):
            try:
                registry = registry()
            except Exception as e:
                logger.warning(f"Host player registry {import_path} could not be created: {e}", exc_info=True)
                return None
        if not isinstance(registry, PlayerRegistry):
            logger.warning(f"{import_path} does not provide a player registry; ignoring it")
            return None

        logger.info(f"Using host player registry from {import_path}")
        return cls(registry)

    def find_by_name(self, name: str) -> Profile | None:
        unique_id = self.registry.get_player_id(name)
        if unique_id is None:
            return None
        # The registry may report the canonical spelling of the name
        current_name = self.registry.get_player_name(unique_id) or name
        return Profile(unique_id, current_name)

    def find_by_uuid(self, unique_id: uuid.UUID) -> Profile | None:
        name = self.registry.get_player_name(unique_id)
        if name is None:
            return None
        return Profile(unique_id, name)
