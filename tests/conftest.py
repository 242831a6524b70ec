"""Pytest configuration and shared fixtures"""

import base64
import inspect
import json
import os
import time

import httpx
import pytest

from allocation_client.client import ApiClient
from allocation_client.config import Config
from allocation_client.consts import TOKEN_KEY
from allocation_client.storage import MemoryStorage

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)


def _segment(obj):
    raw = obj if isinstance(obj, bytes) else json.dumps(obj).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


@pytest.fixture
def make_token():
    """Factory for unsigned JWTs: make_token(exp_offset=3600) or make_token(claims={...})"""

    def _make(exp_offset=3600, claims=None):
        if claims is None:
            claims = {"sub": "admin@example.com", "exp": int(time.time()) + exp_offset}
        header = _segment({"alg": "HS256", "typ": "JWT"})
        return f"{header}.{_segment(claims)}.{_segment(b'signature')}"

    return _make


@pytest.fixture
def valid_token(make_token):
    return make_token(exp_offset=3600)


@pytest.fixture
def expired_token(make_token):
    return make_token(exp_offset=-3600)


@pytest.fixture
def storage():
    """Fresh in-memory session storage"""
    return MemoryStorage()


@pytest.fixture
def config():
    """Config fixture for client tests"""
    return Config(
        base_url="http://test-api.com",
        storage_file="/tmp/unused-session.json",
        log_level="DEBUG",
        timeout_seconds=5,
    )


@pytest.fixture
def requests_sent():
    """Every httpx.Request the mock transport receives, in order"""
    return []


@pytest.fixture
def make_client(config, storage, requests_sent):
    """Build an ApiClient whose transport is an httpx.MockTransport.

    Messages are translated to their own keys so tests can assert on them.
    """

    def _make(handler, client_config=None):
        async def recording_handler(request):
            requests_sent.append(request)
            result = handler(request)
            if inspect.isawaitable(result):
                result = await result
            return result

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        return ApiClient(
            client_config or config,
            storage=storage,
            translate=lambda key: key,
            http_client=http_client,
        )

    return _make


@pytest.fixture
def logged_in(storage, valid_token):
    """Storage populated with a live session"""
    storage.set_item(TOKEN_KEY, valid_token)
    storage.set_item("auth_user", json.dumps({"id": 1, "email": "admin@example.com"}))
    storage.set_item("remember_me", "true")
    return valid_token


@pytest.fixture
def clean_env():
    """Fixture that temporarily clears ALLOCATION_CLIENT_* environment variables.

    This ensures Config tests see the true defaults without interference
    from environment variables that might be set in the user's shell.
    """
    client_vars = {
        key: value
        for key, value in os.environ.items()
        if key.startswith("ALLOCATION_CLIENT_")
    }

    for key in client_vars:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key, value in client_vars.items():
            os.environ[key] = value


@pytest.fixture
def clean_config(clean_env):
    """Fixture that provides a Config instance with clean environment."""
    return Config()
