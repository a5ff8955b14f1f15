import logging
from datetime import datetime, timezone
from typing import List

from tinylink.exceptions import CodeConflict, InvalidCode, NotFound
from tinylink.schemas.link import LinkRecord
from tinylink.storage.strategies import LinkStorage
from tinylink.validators import is_valid_code, validate_web_url


logger = logging.getLogger(__name__)


class LinkRegistry:
    """
    Owner of all persisted links.

    The storage strategy is injected (created once by StorageFactory and
    shared by every request), so tests can swap in an in-memory backend.

    Guarantees rest on the storage engine, not on this class:
    - create() is decided by the engine's uniqueness check, so
      exists() beforehand is only an early answer
    - increment_click() is one atomic storage update
    - list() is a read-committed snapshot; a link created or deleted
      while it runs may or may not appear

    A call abandoned by its caller (timeout, disconnect) may still have
    been applied.
    """

    def __init__(self, storage: LinkStorage):
        self.storage = storage

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    async def list(self) -> List[LinkRecord]:
        """All links, newest first"""
        return await self.storage.fetch_all()

    async def get(self, code: str) -> LinkRecord:
        link = await self.storage.fetch(code)
        if link is None:
            raise NotFound(code)
        return link

    async def exists(self, code: str) -> bool:
        return await self.storage.contains(code)

    async def create(self, code: str, url: str) -> LinkRecord:
        """
        Persist a new link with clicks=0 and no last_clicked.

        Both inputs are validated before storage is touched.

        Raises:
            InvalidCode / InvalidURL: malformed input (nothing written)
            CodeConflict: code already stored, including when a concurrent
                create committed first
            StorageUnavailable: storage failure
        """
        if not is_valid_code(code):
            raise InvalidCode(code)
        url = validate_web_url(url)

        try:
            link = await self.storage.insert(code, url, self._now())
        except CodeConflict:
            logger.info("Create rejected, code %s already exists", code)
            raise

        logger.info("Created link %s -> %s", code, url)
        return link

    async def increment_click(self, code: str) -> bool:
        """
        Record one click.

        A code that no longer exists (deleted between lookup and click) is
        ignored rather than treated as an error.

        Returns:
            True if a click was recorded
        """
        recorded = await self.storage.increment_clicks(code, self._now())
        if not recorded:
            logger.debug("Click for unknown code %s ignored", code)
        return recorded

    async def delete(self, code: str) -> None:
        """Hard delete. A second delete of the same code raises NotFound."""
        if not await self.storage.remove(code):
            raise NotFound(code)
        logger.info("Deleted link %s", code)
