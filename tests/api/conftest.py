"""
Fixtures for outreach API tests.

The app is built with create_app(container) around the in-memory result
store and mocked capability providers, so no MongoDB or provider traffic
happens. Auth runs with a configured shared secret.
"""

import pytest
from fastapi.testclient import TestClient

from outreach_api.app import create_app
from outreach_api.config import get_settings
from outreach_api.dependencies import build_services

TEST_SECRET = "test-secret-token-8f3a9c"
TEST_USER = "user-1"


@pytest.fixture
def api_settings(monkeypatch):
    monkeypatch.setenv("RUNNER_API_SECRET", TEST_SECRET)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def container(store, research_provider, verify_provider, compose_provider):
    return build_services(
        store=store,
        research=research_provider,
        verify=verify_provider,
        compose=compose_provider,
        cache_max_age_hours=168,
    )


@pytest.fixture
def client(api_settings, container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TEST_SECRET}", "X-User-Id": TEST_USER}


@pytest.fixture
def run_body():
    return {
        "company": "Acme",
        "role": "CTO",
        "highlights": "Scaled platform to 10M users; led 40-person engineering org",
    }

