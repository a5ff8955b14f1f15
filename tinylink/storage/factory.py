"""
Factory for creating link storage instances.
Simple, clean factory with singleton caching.
"""

import logging
import threading
from enum import Enum

from .strategies import LinkStorage, SQLAlchemyLinkStorage, RedisLinkStorage, InMemoryLinkStorage
from tinylink.config import settings
from tinylink.exceptions import StorageUnavailable


logger = logging.getLogger(__name__)


class StorageBackend(Enum):
    """Available link storage backends"""
    SQLALCHEMY = "sqlalchemy"
    REDIS = "redis"
    MEMORY = "memory"


class StorageFactory:
    """
    Simple factory for creating link storage instances.

    Uses Singleton Pattern - creates instance once, reuses it.
    Gets configuration from settings (not passed as parameters).
    """

    _instance: LinkStorage = None  # Single cached instance
    _lock = threading.Lock()

    @classmethod
    def create(cls, backend: StorageBackend) -> LinkStorage:
        """
        Create or return cached storage instance.

        Args:
            backend: Type of storage backend (from enum)

        Returns:
            Singleton storage instance

        Raises:
            StorageUnavailable: if Redis does not answer a ping. Links are
                the system of record, so there is no fallback to memory.
        """
        if cls._instance is not None:
            return cls._instance

        # FastAPI resolves sync dependencies in a threadpool
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls._build(backend)
        return cls._instance

    @classmethod
    def _build(cls, backend: StorageBackend) -> LinkStorage:
        if backend == StorageBackend.SQLALCHEMY:
            from tinylink.database.connection import engine

            return SQLAlchemyLinkStorage(engine)

        if backend == StorageBackend.REDIS:
            import redis

            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                # Test connection immediately
                redis_client.ping()
            except redis.exceptions.RedisError as exc:
                logger.error("Redis connection failed: %s", exc)
                raise StorageUnavailable("redis is unreachable") from exc

            logger.info("Redis link storage initialized")
            return RedisLinkStorage(redis_client, key_prefix=settings.redis_key_prefix)

        if backend == StorageBackend.MEMORY:
            logger.info("In-memory link storage initialized")
            return InMemoryLinkStorage()

        raise ValueError(f"Unknown storage backend: {backend}")

    @classmethod
    async def shutdown(cls):
        """Close the cached instance, if any, and forget it"""
        with cls._lock:
            storage, cls._instance = cls._instance, None
        if storage is not None:
            await storage.close()
            logger.info("Link storage closed")

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
