"""
Root test configuration and fixtures for profile-resolver.

This conftest.py provides common fixtures for all unit tests:
- sample profiles and a bulk profile factory
- fake HTTP responses and sessions (no test touches the network)
- a settings cache reset between tests

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from profile_resolver.core.models import Profile  # noqa: E402
from profile_resolver.settings import get_settings  # noqa: E402

NOTCH_ID = uuid.UUID("069a79f4-44e9-4726-a5be-fca90e38aaf5")
JEB_ID = uuid.UUID("853c80ef-3c37-49fd-aa49-938b674adae6")
DINNERBONE_ID = uuid.UUID("61699b2e-d327-4a01-9f1e-0ea8c3f06bc6")


def create_profile(index: int) -> Profile:
    """Deterministic profile for bulk tests (player0, player1, ...)."""
    return Profile(uuid.UUID(int=index + 1), f"player{index}")


def create_mock_response(payload=None, status_code: int = 200):
    """Create a mock requests.Response returning a JSON payload.

    A payload of None gives an empty body, like a 204 No Content.
    """
    response = Mock()
    response.status_code = status_code
    response.json = Mock(return_value=payload)
    response.content = b"" if payload is None else b"<json>"
    response.raise_for_status = Mock()
    return response


def create_mock_session(*outcomes):
    """Create a mock requests.Session.

    Each call to session.request() consumes the next outcome. Responses are
    returned, exceptions are raised.
    """
    session = Mock()
    session.request = Mock(side_effect=list(outcomes))
    return session


@pytest.fixture
def notch():
    return Profile(NOTCH_ID, "Notch")


@pytest.fixture
def jeb():
    return Profile(JEB_ID, "jeb_")


@pytest.fixture
def dinnerbone():
    return Profile(DINNERBONE_ID, "Dinnerbone")


@pytest.fixture
def sample_profiles(notch, jeb, dinnerbone):
    """Three well-known profiles."""
    return [notch, jeb, dinnerbone]


@pytest.fixture
def make_profile():
    """Factory fixture for bulk profiles."""
    return create_profile


@pytest.fixture
def mock_response():
    """Factory fixture for fake HTTP responses."""
    return create_mock_response


@pytest.fixture
def mock_session():
    """Factory fixture for fake HTTP sessions."""
    return create_mock_session


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Clear cached settings and resolver environment variables around every test."""
    for key in list(os.environ):
        if key.startswith("PROFILE_RESOLVER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
