"""Shared test fixtures."""

import httpx
import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient

from modview.config import Config, ServerConfig, UpstreamConfig
from modview.server import create_app
from tests.fakes import API_URL, CDN_URL, STORAGE_URL, FakeRegistry, RecordingObserver


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration pointing at the fake registry hosts."""
    return Config(
        server=ServerConfig(),
        upstream=UpstreamConfig(api_url=API_URL, cdn_url=CDN_URL, storage_url=STORAGE_URL),
    )


@pytest.fixture
def app(test_config: Config, registry: FakeRegistry, recorder: RecordingObserver) -> web.Application:
    """Create app whose upstream calls go to the fake registry."""
    return create_app(
        test_config,
        transport=httpx.MockTransport(registry.handler),
        observer=recorder,
    )


@pytest.fixture
def client(app: web.Application, aiohttp_client) -> TestClient:
    """Create test client for the app."""
    return aiohttp_client(app)
