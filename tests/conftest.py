"""Shared pytest fixtures for s3bridge tests.

A single FastAPI app is created per test session to avoid duplicate
Prometheus metric registration errors (the instrumentator registers
collectors in the global prometheus_client registry).

The metadata index and object store are attached to ``app.state`` by the
fixtures rather than by the lifespan, which ASGITransport does not run.
Each test gets fresh backends so no state leaks between tests.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from s3bridge.config import (
    MetadataConfig,
    S3BridgeConfig,
    ServerConfig,
    StorageConfig,
)
from s3bridge.metadata.sqlite import SQLiteMetadataIndex
from s3bridge.server import create_app
from s3bridge.storage.local import LocalObjectStore


@pytest.fixture(scope="session")
def config() -> S3BridgeConfig:
    """Create a test S3BridgeConfig."""
    return S3BridgeConfig(
        server=ServerConfig(host="127.0.0.1", port=9010),
        metadata=MetadataConfig(engine="sqlite", sqlite_path=":memory:"),
        storage=StorageConfig(backend="local", local_root="/tmp/s3bridge-test"),
    )


@pytest.fixture(scope="session")
def app(config: S3BridgeConfig):
    """Create a single test FastAPI application for the whole session."""
    return create_app(config)


@pytest.fixture
async def metadata():
    """A fresh in-memory SQLite metadata index."""
    index = SQLiteMetadataIndex(":memory:")
    await index.init_db()
    yield index
    await index.close()


@pytest.fixture
async def storage(tmp_path):
    """A fresh local object store in a temp directory."""
    store = LocalObjectStore(str(tmp_path / "objects"))
    await store.init()
    yield store
    await store.close()


@pytest.fixture
async def client(app, config, metadata, storage) -> AsyncClient:
    """Create an async test client with fresh backends on app.state.

    The previous app.state backends and config are restored afterwards so
    tests that swap them do not affect each other.
    """
    old_metadata = getattr(app.state, "metadata", None)
    old_storage = getattr(app.state, "storage", None)
    app.state.metadata = metadata
    app.state.storage = storage
    app.state.config = config

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.state.metadata = old_metadata
    app.state.storage = old_storage
    app.state.config = config
