"""Tests for settings and runtime wiring."""

import pytest

from murmur.config import Settings
from murmur.events.bus import InMemoryEventBus
from murmur.runtime import Runtime


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.event_exchange_name == "socialmedia_events"
        assert settings.event_exchange_durable is False
        assert settings.post_cache_ttl == 3600
        assert settings.post_list_cache_ttl == 300
        assert settings.search_cache_ttl == 3600
        assert settings.search_result_limit == 10

    def test_env_aliases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVICE_ROLE", "search")
        monkeypatch.setenv("EVENT_EXCHANGE", "custom_events")
        monkeypatch.setenv("CACHE_TIMEOUT", "0.25")

        settings = Settings()

        assert settings.service_role == "search"
        assert settings.event_exchange_name == "custom_events"
        assert settings.cache_timeout_seconds == 0.25

    @pytest.mark.parametrize(
        ("role", "posts", "search"),
        [("all", True, True), ("posts", True, False), ("search", False, True)],
    )
    def test_roles(self, role: str, posts: bool, search: bool) -> None:
        settings = Settings(service_role=role)
        assert settings.runs_posts is posts
        assert settings.runs_search is search


class TestRuntimeFromSettings:
    @pytest.mark.parametrize(
        ("role", "has_posts", "has_search"),
        [("all", True, True), ("posts", True, False), ("search", False, True)],
    )
    async def test_services_follow_role(self, role: str, has_posts: bool, has_search: bool) -> None:
        runtime = Runtime.from_settings(Settings(service_role=role, event_bus_backend="memory"))

        assert isinstance(runtime.event_bus, InMemoryEventBus)
        assert (runtime.post_service is not None) is has_posts
        assert (runtime.search_service is not None) is has_search
        assert (runtime.search_projection is not None) is has_search
        if runtime.search_projection is not None and runtime.search_service is not None:
            assert (
                runtime.search_projection.invalidation.read_through
                is runtime.search_service.read_through
            )

        await runtime.close()

    def test_unknown_role(self) -> None:
        with pytest.raises(ValueError):
            Runtime.from_settings(Settings(service_role="media", event_bus_backend="memory"))
