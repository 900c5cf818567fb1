"""Shared pytest configuration and fixtures for NIM Proxy tests."""

import pytest
from fastapi.testclient import TestClient

from nim_proxy.core.config import Config, ServerConfig, UpstreamConfig
from nim_proxy.core.config.schema import ConfigSchema
from nim_proxy.main import create_app

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]

TEST_API_KEY = "test-nvidia-key-mocked"
TEST_BASE_URL = "https://nim.test/v1"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "tests/unit/" in str(item.fspath) or "tests/cli/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove every proxy environment variable so a developer's .env never leaks in."""
    for name in ConfigSchema.all_specs():
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_config():
    """Configuration pointing at the mocked upstream with a fake credential."""
    return Config(
        server=ServerConfig(log_level="DEBUG", log_request_bodies=True),
        upstream=UpstreamConfig(api_key=TEST_API_KEY, base_url=TEST_BASE_URL),
    )


@pytest.fixture
def keyless_config():
    """Configuration without NVIDIA_API_KEY."""
    return Config(upstream=UpstreamConfig(api_key=None, base_url=TEST_BASE_URL))


@pytest.fixture
def client(test_config):
    """TestClient running the app lifespan against ``test_config``."""
    with TestClient(create_app(test_config)) as test_client:
        yield test_client


@pytest.fixture
def keyless_client(keyless_config):
    with TestClient(create_app(keyless_config)) as test_client:
        yield test_client
