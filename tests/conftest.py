"""
pytest fixtures for the Nautobot provider tests.

The upstream is faked in-process: ``fake_app`` is a FastAPI fake of the
manufacturers endpoint, ``asgi_transport`` routes httpx requests to it.
Error scenarios use ``httpx.MockTransport`` directly in the tests.
"""

import httpx
import pytest

from fake_nautobot import create_app, manufacturer
from nautobot_provider.client import create_client
from nautobot_provider.credential import TokenCredential

BASE_URL = "https://nb.example.com"
TOKEN = "abc"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Never let a developer's real Nautobot settings leak into tests."""
    monkeypatch.delenv("NAUTOBOT_URL", raising=False)
    monkeypatch.delenv("NAUTOBOT_TOKEN", raising=False)


@pytest.fixture
def acme():
    return manufacturer("Acme", id="11111111-1111-1111-1111-111111111111")


@pytest.fixture
def fake_app(acme):
    return create_app([acme], token=TOKEN)


@pytest.fixture
def asgi_transport(fake_app):
    return httpx.ASGITransport(app=fake_app)


@pytest.fixture
def api_client(asgi_transport):
    return create_client(BASE_URL, TokenCredential(TOKEN), transport=asgi_transport)


@pytest.fixture
def mock_api():
    """Factory for an ApiClient whose requests are answered by a handler."""

    def _make(handler, base_url: str = BASE_URL, token: str = TOKEN):
        return create_client(base_url, TokenCredential(token), transport=httpx.MockTransport(handler))

    return _make
