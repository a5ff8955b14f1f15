"""
Link storage module.

This module implements the Strategy Pattern for pluggable link storage.
The registry depends only on LinkStorage, never on a specific engine.
"""

from .strategies import LinkStorage, SQLAlchemyLinkStorage, RedisLinkStorage, InMemoryLinkStorage
from .factory import StorageFactory, StorageBackend

__all__ = [
    "LinkStorage",
    "SQLAlchemyLinkStorage",
    "RedisLinkStorage",
    "InMemoryLinkStorage",
    "StorageFactory",
    "StorageBackend",
]
