"""
FastAPI dependencies for dependency injection.

The storage handle is created once and shared by every in-flight request;
everything built on top of it is cheap and built per request.
Tests override get_storage to inject an in-memory or fake backend.
"""

from functools import lru_cache

from fastapi import Depends

from tinylink.config import settings
from tinylink.services.code_generator import CodeGenerator
from tinylink.services.link_registry import LinkRegistry
from tinylink.services.link_service import LinkService
from tinylink.storage.factory import StorageFactory, StorageBackend
from tinylink.storage.strategies import LinkStorage


@lru_cache()
def get_storage() -> LinkStorage:
    """
    Get storage instance (singleton).

    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = StorageBackend(settings.storage_backend)
    return StorageFactory.create(backend)


@lru_cache()
def get_code_generator() -> CodeGenerator:
    return CodeGenerator(
        length=settings.code_length,
        max_attempts=settings.max_code_attempts
    )


def get_link_service(
    storage: LinkStorage = Depends(get_storage),
    code_generator: CodeGenerator = Depends(get_code_generator)
) -> LinkService:
    """Get LinkService with all dependencies injected."""
    return LinkService(registry=LinkRegistry(storage), code_generator=code_generator)
