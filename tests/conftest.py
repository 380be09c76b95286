from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.config import Settings
from src.main import create_app
from src.services.storage import InMemoryObjectStorage


@pytest.fixture
def settings() -> Settings:
    return Settings(bucket="my-bucket", storage_backend="memory", _env_file=None)


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage(bucket="my-bucket")


@pytest.fixture
def app(settings: Settings, storage: InMemoryObjectStorage) -> FastAPI:
    return create_app(settings, storage=storage)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
