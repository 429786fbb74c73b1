"""Tests for sources answering from local state: maps, caches, host registries."""

from __future__ import annotations

import sys
import types
import uuid
from unittest.mock import Mock, patch

import pytest

from profile_resolver.cache import HashMapCache
from profile_resolver.core.interfaces import MAX_REQUEST_LIMIT, ProfileCache
from profile_resolver.errors import ConfigurationError
from profile_resolver.resolution import (
    CacheLookupService,
    HashMapService,
    HostPlayerService,
    PreferredCachedService,
)


class FakeRegistry:
    """Host registry with a fixed set of online players."""

    def __init__(self, profiles=()):
        self.ids = {profile.name.casefold(): profile.unique_id for profile in profiles}
        self.names = {profile.unique_id: profile.name for profile in profiles}

    def get_player_id(self, name):
        return self.ids.get(name.casefold())

    def get_player_name(self, unique_id):
        return self.names.get(unique_id)


class IdOnlyCache(ProfileCache):
    """Cache without reverse lookup."""

    def __init__(self):
        self.entries = {}

    def put(self, profile):
        self.entries[profile.unique_id] = profile

    def put_all(self, profiles):
        for profile in profiles:
            self.put(profile)

    def get_if_present(self, unique_id):
        return self.entries.get(unique_id)

    def get_all_present(self, unique_ids):
        return {key: self.entries[key] for key in unique_ids if key in self.entries}


class TestHashMapService:
    """Tests for the in-process map source."""

    def test_initial_mapping(self, notch):
        service = HashMapService({"Notch": notch.unique_id})

        assert service.find_by_name("Notch") == notch
        assert service.find_by_uuid(notch.unique_id) == notch
        assert service.find_by_name("notch") is None

    def test_put_and_batch_lookup(self, sample_profiles, notch, jeb):
        service = HashMapService()
        service.put_all(sample_profiles)

        profiles = service.find_all_by_name(["Notch", "jeb_", "Notch", "nobody"])

        assert profiles == [notch, jeb]
        assert service.ideal_request_limit == MAX_REQUEST_LIMIT

    def test_visit_honours_stop(self, sample_profiles):
        service = HashMapService()
        service.put_all(sample_profiles)
        visited = []

        service.visit_all_by_uuid(
            [profile.unique_id for profile in sample_profiles],
            lambda profile: visited.append(profile) or False,
        )

        assert len(visited) == 1


class TestCacheLookupService:
    """Tests for serving lookups from a cache."""

    def test_uuid_lookups(self, notch):
        cache = HashMapCache()
        cache.put(notch)
        service = CacheLookupService(cache)

        assert service.find_by_uuid(notch.unique_id) == notch
        assert service.find_all_by_uuid([notch.unique_id, uuid.UUID(int=3)]) == [notch]

    def test_name_lookups_with_reverse_index(self, notch):
        cache = HashMapCache()
        cache.put(notch)
        service = CacheLookupService(cache)

        assert service.supports_names is True
        assert service.find_by_name("Notch") == notch
        assert service.find_all_by_name(["Notch", "nobody"]) == [notch]

    def test_name_lookups_without_reverse_index(self, notch):
        """Test that names fall through when the cache can't look them up."""
        cache = IdOnlyCache()
        cache.put(notch)
        service = CacheLookupService(cache)

        assert service.supports_names is False
        assert service.find_by_name("Notch") is None
        assert service.find_all_by_name(["Notch"]) == []
        assert service.find_by_uuid(notch.unique_id) == notch

    def test_requires_cache(self):
        with pytest.raises(ConfigurationError):
            CacheLookupService(None)  # type: ignore[arg-type]


class TestHostPlayerService:
    """Tests for the optional host player registry source."""

    def test_lookups_use_canonical_name(self, notch):
        service = HostPlayerService(FakeRegistry([notch]))

        profile = service.find_by_name("notch")

        assert profile == notch
        assert profile is not None and profile.name == "Notch"
        assert service.find_by_uuid(notch.unique_id) == notch
        assert service.find_by_uuid(uuid.UUID(int=9)) is None
        assert service.find_by_name("offline") is None

    def test_rejects_non_registry(self):
        with pytest.raises(ConfigurationError):
            HostPlayerService(object())  # type: ignore[arg-type]

    def test_detect_unset(self):
        assert HostPlayerService.detect(None) is None
        assert HostPlayerService.detect("") is None

    def test_detect_missing_module(self):
        assert HostPlayerService.detect("no_such_module_for_players:registry") is None

    def test_detect_missing_attribute(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "fake_host", types.ModuleType("fake_host"))

        assert HostPlayerService.detect("fake_host:players") is None

    def test_detect_instance(self, monkeypatch, notch):
        module = types.ModuleType("fake_host")
        module.players = FakeRegistry([notch])
        monkeypatch.setitem(sys.modules, "fake_host", module)

        service = HostPlayerService.detect("fake_host:players")

        assert service is not None
        assert service.find_by_uuid(notch.unique_id) == notch

    def test_detect_class_is_instantiated(self, monkeypatch):
        module = types.ModuleType("fake_host")
        module.Registry = FakeRegistry
        monkeypatch.setitem(sys.modules, "fake_host", module)

        service = HostPlayerService.detect("fake_host:Registry")

        assert service is not None
        assert isinstance(service.registry, FakeRegistry)

    def test_detect_factory_is_called(self, monkeypatch, notch):
        module = types.ModuleType("fake_host")
        module.get_registry = lambda: FakeRegistry([notch])
        monkeypatch.setitem(sys.modules, "fake_host", module)

        service = HostPlayerService.detect("fake_host:get_registry")

        assert service is not None
        assert service.find_by_name("Notch") == notch

    def test_detect_failing_factory(self, monkeypatch, caplog):
        """Test that a registry that can't be created is treated as absent."""

        def get_registry():
            raise RuntimeError("server not running")

        module = types.ModuleType("fake_host")
        module.get_registry = get_registry
        monkeypatch.setitem(sys.modules, "fake_host", module)

        assert HostPlayerService.detect("fake_host:get_registry") is None
        assert "server not running" in caplog.text

    def test_detect_failing_import(self):
        """Test that a module failing during import is treated as absent."""
        with patch(
            "profile_resolver.resolution.host_registry.importlib.import_module",
            side_effect=RuntimeError("broken plugin"),
        ):
            assert HostPlayerService.detect("broken_host:players") is None

    def test_detect_wrong_object(self, monkeypatch):
        module = types.ModuleType("fake_host")
        module.players = 42
        monkeypatch.setitem(sys.modules, "fake_host", module)

        assert HostPlayerService.detect("fake_host:players") is None


class TestPreferredCachedService:
    """Tests for preferring online players and cached answers over the resolver."""

    def test_preferred_source_first(self, notch):
        """Test that online players are answered without the cache or resolver."""
        resolver = Mock()
        cache = HashMapCache()
        service = PreferredCachedService(resolver, cache, HostPlayerService(FakeRegistry([notch])))

        assert service.find_by_name("Notch") == notch
        resolver.find_by_name.assert_not_called()
        assert cache.get_if_present(notch.unique_id) == notch

    def test_cache_before_resolver(self, jeb):
        resolver = Mock()
        cache = HashMapCache()
        cache.put(jeb)
        service = PreferredCachedService(resolver, cache, HostPlayerService(FakeRegistry()))

        assert service.find_by_uuid(jeb.unique_id) == jeb
        resolver.find_by_uuid.assert_not_called()

    def test_resolver_last_and_cached(self, dinnerbone):
        resolver = HashMapService({"Dinnerbone": dinnerbone.unique_id})
        cache = HashMapCache()
        service = PreferredCachedService(resolver, cache)

        assert service.find_by_name("Dinnerbone") == dinnerbone
        assert cache.get_if_present(dinnerbone.unique_id) == dinnerbone

    def test_batch_asks_each_stage_for_missing_keys(self, notch, jeb, dinnerbone):
        """Test the preferred -> cache -> resolver order for batches."""
        cache = HashMapCache()
        cache.put(jeb)
        resolver = Mock()
        resolver.find_all_by_name.return_value = [dinnerbone]
        service = PreferredCachedService(resolver, cache, HostPlayerService(FakeRegistry([notch])))

        profiles = service.find_all_by_name(["Notch", "jeb_", "Dinnerbone", "nobody"])

        assert set(profiles) == {notch, jeb, dinnerbone}
        resolver.find_all_by_name.assert_called_once_with(["Dinnerbone", "nobody"])
        assert cache.get_if_present(dinnerbone.unique_id) == dinnerbone
        assert cache.get_if_present(notch.unique_id) == notch

    def test_requests_handed_to_sources_are_not_changed_afterwards(self, notch, jeb):
        """Test that a source keeping its argument still sees the full request."""
        received = []

        def keep_argument(names):
            received.append(names)
            return [notch] if "Notch" in names else []

        preferred = Mock(spec=HashMapService)
        preferred.find_all_by_name.side_effect = keep_argument
        resolver = Mock()
        resolver.find_all_by_name.side_effect = keep_argument
        cache = HashMapCache()
        cache.put(jeb)
        service = PreferredCachedService(resolver, cache, preferred)

        service.find_all_by_name(["Notch", "jeb_", "nobody"])

        assert received == [["Notch", "jeb_", "nobody"], ["nobody"]]

    def test_batch_skips_resolver_when_complete(self, notch):
        resolver = Mock()
        cache = HashMapCache()
        cache.put(notch)
        service = PreferredCachedService(resolver, cache)

        assert service.find_all_by_uuid([notch.unique_id]) == [notch]
        resolver.find_all_by_uuid.assert_not_called()

    def test_streaming_goes_to_resolver_with_cache_writes(self, notch):
        resolver = HashMapService({"Notch": notch.unique_id})
        cache = HashMapCache()
        service = PreferredCachedService(resolver, cache)
        visited = []

        service.visit_all_by_name(["Notch"], visited.append)

        assert visited == [notch]
        assert len(cache) == 1
