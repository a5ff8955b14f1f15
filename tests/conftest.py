"""
Test configuration and fixtures for TinyLink.
This centralizes all test setup, making individual tests clean.
"""

import fakeredis
import pytest
from fastapi.testclient import TestClient

from main import app
from tinylink.database.connection import Base, make_engine
from tinylink.dependencies import get_storage
from tinylink.services.code_generator import CodeGenerator
from tinylink.services.link_registry import LinkRegistry
from tinylink.services.link_service import LinkService
from tinylink.storage.strategies import (
    InMemoryLinkStorage,
    RedisLinkStorage,
    SQLAlchemyLinkStorage,
)


@pytest.fixture(scope="function")
def sql_storage(tmp_path):
    """
    Fresh SQLite file database for each test.

    A file (not :memory:) so that worker threads share one database.
    """
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    storage = SQLAlchemyLinkStorage(engine)

    try:
        yield storage
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def memory_storage():
    return InMemoryLinkStorage()


@pytest.fixture(scope="function")
def redis_storage():
    client = fakeredis.FakeRedis(decode_responses=True)
    storage = RedisLinkStorage(client, key_prefix="test")

    try:
        yield storage
    finally:
        client.flushall()


@pytest.fixture(params=["sql_storage", "memory_storage", "redis_storage"])
def storage(request):
    """Every registry property must hold on every backend"""
    return request.getfixturevalue(request.param)


@pytest.fixture(scope="function")
def registry(storage):
    return LinkRegistry(storage)


@pytest.fixture(scope="function")
def service(registry):
    return LinkService(registry=registry, code_generator=CodeGenerator())


@pytest.fixture(scope="function")
def client(sql_storage):
    """
    Create a test client with the storage dependency overridden.
    This is the main fixture that API tests will use.
    """
    app.dependency_overrides[get_storage] = lambda: sql_storage

    with TestClient(app) as test_client:
        yield test_client

    # Clean up overrides
    app.dependency_overrides.clear()
