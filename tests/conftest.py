import pytest
from typing import Any, Dict, List, Optional, Union
from typer.testing import CliRunner

from sbclient.core.client import StoryblokClient
from sbclient.domain.interfaces.http_transport import HttpTransport
from sbclient.domain.models.common import TransportResponse
from sbclient.domain.models.config import CacheConfig, ClientConfig
from sbclient.infrastructure.cache.cache_versions import SHARED_CACHE_VERSIONS, CacheVersionTracker
from sbclient.infrastructure.cache.memory_cache import SHARED_MEMORY_STORE, MemoryStore
from sbclient.infrastructure.config import settings
from sbclient.infrastructure.resilience.api_retry import ApiRetryService


class FakeTransport(HttpTransport):
    """Scripted transport: returns (or raises) queued outcomes in order.

    When the script runs out, ``default`` is used for every further call.
    """

    def __init__(self, outcomes: Optional[List[Union[TransportResponse, Exception]]] = None, default: Any = None):
        self.outcomes = list(outcomes or [])
        self.default = default
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def request(self, method, path, params=None, json=None):
        self.calls.append({"method": method, "path": path, "params": dict(params or {}), "json": json})
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if callable(outcome) and not isinstance(outcome, Exception):
            outcome = outcome(method, path, params)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def aclose(self):
        self.closed = True


def ok(body: Any, headers: Optional[Dict[str, str]] = None, redirect_count: int = 0, status: int = 200) -> TransportResponse:
    return TransportResponse(status=status, headers=headers or {}, body=body, redirect_count=redirect_count)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def cache_versions():
    return CacheVersionTracker()


@pytest.fixture
def make_client(memory_store, cache_versions):
    """Factory building a StoryblokClient over a FakeTransport with isolated stores."""
    def _make(
        transport: FakeTransport,
        cache: Optional[CacheConfig] = None,
        access_token: str = "public-token",
        max_retries: int = 5,
        rate_limit: int = 100,
        **config_kwargs: Any,
    ) -> StoryblokClient:
        config = ClientConfig(
            access_token=access_token,
            cache=cache or CacheConfig(type="memory", clear="manual"),
            max_retries=max_retries,
            rate_limit=rate_limit,
            **config_kwargs,
        )
        return StoryblokClient(
            config,
            transport=transport,
            cache_versions=cache_versions,
            memory_store=memory_store,
            retry_service=ApiRetryService(max_retries=max_retries, backoff_unit_s=0),
        )
    return _make


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_shared_state(monkeypatch):
    """Keeps process-wide stores and configuration from leaking between tests."""
    SHARED_MEMORY_STORE.clear()
    SHARED_CACHE_VERSIONS.clear()
    settings.clear_test_config()
    monkeypatch.setattr(settings, "_loaded", True)
    monkeypatch.setattr(settings, "_config", {})
    for var in ("STORYBLOK_ACCESS_TOKEN", "STORYBLOK_OAUTH_TOKEN", "STORYBLOK_REGION", "STORYBLOK_RATE_LIMIT"):
        monkeypatch.delenv(var, raising=False)
    yield
    SHARED_MEMORY_STORE.clear()
    SHARED_CACHE_VERSIONS.clear()
    settings.clear_test_config()


@pytest.fixture
def fake_transport():
    """The FakeTransport class, for building scripted transports."""
    return FakeTransport


@pytest.fixture
def ok_response():
    """Builder for successful TransportResponse objects."""
    return ok
