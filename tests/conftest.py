"""
Pytest fixtures for the Compli API tests.
"""

import os
from unittest.mock import MagicMock

# Keep tests off any real database before main/database are imported.
os.environ.pop("DATABASE_URL", None)
os.environ.pop("DATABASE_NAME", None)

import pytest
from fastapi.testclient import TestClient

from cache import MemoryCache
from config import Settings, get_settings
from rate_limit import InMemoryRateLimitStore, SlidingWindowRateLimiter


@pytest.fixture
def fake_response():
    """Factory for requests.Response stand-ins."""

    def make(status_code=200, json_data=None, text="", reason="OK"):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.reason = reason
        response.text = text
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response

    return make


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        google_api_key="test-google-key",
        google_cse_id="test-cse",
        gnews_api_key="test-gnews",
        rapidapi_key="test-rapidapi",
        openrouter_api_key="test-openrouter",
        admin_email="admin@example.com",
        identity_proxy_secret="proxy-secret",
        cache_dir=str(tmp_path),
    )


@pytest.fixture
def limiter():
    return SlidingWindowRateLimiter(InMemoryRateLimitStore(), max_requests=10, window_seconds=60)


@pytest.fixture
def client(settings, limiter):
    """FastAPI test client with settings, limiter and news cache isolated per test."""
    from main import app, get_news_cache, get_rate_limiter

    news_cache = MemoryCache()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_news_cache] = lambda: news_cache
    yield TestClient(app)
    app.dependency_overrides.clear()
