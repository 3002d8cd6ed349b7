"""Pytest configuration and shared fixtures."""

import pytest

from llm_discovery.client import LocalServerClient
from llm_discovery.config import DiscoveryConfig, clear_config_cache
from llm_discovery.defaults import DefaultsStore
from llm_discovery.models import ModelRegistry

from .helpers import ENDPOINT, make_session

ENV_VARS = (
    "LOCAL_ENDPOINT",
    "LLM_DISCOVERY_TIMEOUT",
    "LLM_DISCOVERY_REFRESH",
    "LLM_DISCOVERY_HOST",
    "LLM_DISCOVERY_PORT",
    "LLM_DISCOVERY_API_KEY",
    "LLM_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path):
    """Keep environment, config files and config cache from leaking into tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def registry():
    return ModelRegistry()


@pytest.fixture
def defaults():
    return DefaultsStore()


@pytest.fixture
def discovery_config():
    return DiscoveryConfig(endpoint=ENDPOINT, timeout=1.0)


@pytest.fixture
def client_for():
    """Factory building a LocalServerClient over mocked routes."""

    def factory(routes):
        session = make_session(routes)
        return LocalServerClient(timeout=1.0, session=session), session

    return factory
