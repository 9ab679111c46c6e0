"""Shared fixtures."""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from hookvault.adapters.memory import InMemoryStore
from hookvault.config import Settings
from hookvault.main import create_app
from hookvault.services.webhooks import WebhookService


def make_settings(**overrides) -> Settings:
    """Settings isolated from the process environment and .env files."""
    values = {
        "ENV": "test",
        "LOG_JSON": False,
        "STORE_ADAPTER": "memory",
        "ALLOWED_NAMESPACES": "",
        "RETENTION_DAYS": "30",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def service(settings, store):
    return WebhookService.from_settings(settings, store=store)


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as client:
        yield client
