"""
Link storage strategies using Strategy Pattern.

Allows switching the engine behind the link registry:
- SQLAlchemy: SQLite for development, any SQLAlchemy URL in production
- Redis: shared store for several server processes
- In-memory: tests and demos

Every backend enforces code uniqueness and click-counter atomicity with
its own native primitive, never with a lock held by the caller, and
translates driver errors into CodeConflict / StorageUnavailable so nothing
above this module sees a driver exception.
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from redis.exceptions import RedisError
from sqlalchemy import delete, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from tinylink.database.connection import Base, make_session_factory
from tinylink.exceptions import CodeConflict, StorageUnavailable
from tinylink.models.link import Link
from tinylink.schemas.link import LinkRecord


logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors(backend: str, action: str, *driver_errors) -> Iterator[None]:
    """Re-raise driver failures as StorageUnavailable (CodeConflict passes through)"""
    try:
        yield
    except driver_errors as exc:
        logger.error("%s storage %s failed: %s", backend, action, exc)
        raise StorageUnavailable(f"link storage {action} failed") from exc


class LinkStorage(ABC):
    """
    Abstract base class for link storage strategies.

    All methods are async because they involve I/O. Blocking drivers run
    in a worker thread so one slow query never stalls the event loop, and
    the same instance is safe to call from plain threads.
    """

    @abstractmethod
    async def insert(self, code: str, url: str, created_at: datetime) -> LinkRecord:
        """
        Persist a new link with zero clicks.

        Raises:
            CodeConflict: if the code is already stored. This is the
                authoritative uniqueness check.
        """
        pass

    @abstractmethod
    async def fetch(self, code: str) -> Optional[LinkRecord]:
        """Get one link or None"""
        pass

    @abstractmethod
    async def fetch_all(self) -> List[LinkRecord]:
        """Get every link, newest first"""
        pass

    @abstractmethod
    async def increment_clicks(self, code: str, clicked_at: datetime) -> bool:
        """
        Add one click and set last_clicked in a single atomic update.

        Returns:
            True if the link existed, False otherwise (nothing is written)
        """
        pass

    @abstractmethod
    async def remove(self, code: str) -> bool:
        """Hard-delete a link. Returns False if it was not there."""
        pass

    @abstractmethod
    async def contains(self, code: str) -> bool:
        pass

    async def close(self) -> None:
        """Release connections (no-op by default)"""
        return None


class SQLAlchemyLinkStorage(LinkStorage):
    """
    Relational storage through SQLAlchemy.

    - Uniqueness: the primary key on links.code; a duplicate INSERT fails
      with IntegrityError, whichever transaction commits second.
    - Clicks: one UPDATE ... SET clicks = clicks + 1, last_clicked = ?
    - Each call opens its own short session, so the engine's connection
      pool is the only shared state.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = make_session_factory(engine)
        self._init_database()

    def _init_database(self):
        """Create the links table if it doesn't exist"""
        with self._errors("initialization"):
            Base.metadata.create_all(bind=self.engine)
        logger.info(
            "SQL link storage ready at %s",
            self.engine.url.render_as_string(hide_password=True),
        )

    def _errors(self, action: str):
        return _translate_errors("SQL", action, SQLAlchemyError)

    def _insert(self, code: str, url: str, created_at: datetime) -> LinkRecord:
        link = Link(code=code, url=url, clicks=0, last_clicked=None, created_at=created_at)
        with self._errors("insert"):
            try:
                with self.session_factory.begin() as session:
                    session.add(link)
            except IntegrityError as exc:
                # Only a clash on the primary key is a conflict
                if self._contains(code):
                    raise CodeConflict(code) from exc
                raise
        return LinkRecord.model_validate(link)

    def _fetch(self, code: str) -> Optional[LinkRecord]:
        with self._errors("fetch"), self.session_factory() as session:
            link = session.get(Link, code)
            return LinkRecord.model_validate(link) if link else None

    def _fetch_all(self) -> List[LinkRecord]:
        with self._errors("list"), self.session_factory() as session:
            links = (
                session.query(Link)
                .order_by(Link.created_at.desc(), Link.code.desc())
                .all()
            )
            return [LinkRecord.model_validate(link) for link in links]

    def _increment_clicks(self, code: str, clicked_at: datetime) -> bool:
        statement = (
            update(Link)
            .where(Link.code == code)
            .values(clicks=Link.clicks + 1, last_clicked=clicked_at)
            .execution_options(synchronize_session=False)
        )
        with self._errors("increment"), self.session_factory.begin() as session:
            result = session.execute(statement)
            return result.rowcount > 0

    def _remove(self, code: str) -> bool:
        statement = (
            delete(Link)
            .where(Link.code == code)
            .execution_options(synchronize_session=False)
        )
        with self._errors("delete"), self.session_factory.begin() as session:
            result = session.execute(statement)
            return result.rowcount > 0

    def _contains(self, code: str) -> bool:
        with self._errors("exists"), self.session_factory() as session:
            return session.query(Link.code).filter(Link.code == code).first() is not None

    async def insert(self, code: str, url: str, created_at: datetime) -> LinkRecord:
        return await asyncio.to_thread(self._insert, code, url, created_at)

    async def fetch(self, code: str) -> Optional[LinkRecord]:
        return await asyncio.to_thread(self._fetch, code)

    async def fetch_all(self) -> List[LinkRecord]:
        return await asyncio.to_thread(self._fetch_all)

    async def increment_clicks(self, code: str, clicked_at: datetime) -> bool:
        return await asyncio.to_thread(self._increment_clicks, code, clicked_at)

    async def remove(self, code: str) -> bool:
        return await asyncio.to_thread(self._remove, code)

    async def contains(self, code: str) -> bool:
        return await asyncio.to_thread(self._contains, code)

    async def close(self) -> None:
        self.engine.dispose()


def _text(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisLinkStorage(LinkStorage):
    """
    Redis storage.

    Layout:
    - {prefix}:link:{code}  hash with code, url, clicks, last_clicked, created_at
    - {prefix}:links        sorted set of codes scored by creation time

    Writes use WATCH/MULTI/EXEC: the existence check and the write commit
    together or the transaction is retried, so two processes can never
    both create the same code, and HINCRBY + HSET land as one unit.
    """

    def __init__(self, redis_client, key_prefix: str = "tinylink"):
        """
        Args:
            redis_client: Redis client instance (redis.Redis)
            key_prefix: Namespace for every key this storage writes
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.index_key = f"{key_prefix}:links"

    def _key(self, code: str) -> str:
        return f"{self.key_prefix}:link:{code}"

    def _errors(self, action: str):
        return _translate_errors("Redis", action, RedisError)

    @staticmethod
    def _to_record(data: Dict) -> Optional[LinkRecord]:
        if not data:
            return None
        data = {_text(key): _text(value) for key, value in data.items()}
        return LinkRecord(
            code=data["code"],
            url=data["url"],
            clicks=int(data.get("clicks") or 0),
            last_clicked=data.get("last_clicked") or None,
            created_at=data["created_at"],
        )

    def _insert(self, code: str, url: str, created_at: datetime) -> LinkRecord:
        key = self._key(code)
        mapping = {
            "code": code,
            "url": url,
            "clicks": 0,
            "last_clicked": "",
            "created_at": created_at.isoformat(),
        }

        def claim(pipe):
            if pipe.exists(key):
                raise CodeConflict(code)
            pipe.multi()
            pipe.hset(key, mapping=mapping)
            pipe.zadd(self.index_key, {code: created_at.timestamp()})

        with self._errors("insert"):
            self.redis.transaction(claim, key)

        return LinkRecord(code=code, url=url, clicks=0, last_clicked=None, created_at=created_at)

    def _fetch(self, code: str) -> Optional[LinkRecord]:
        with self._errors("fetch"):
            return self._to_record(self.redis.hgetall(self._key(code)))

    def _fetch_all(self) -> List[LinkRecord]:
        with self._errors("list"):
            codes = [_text(code) for code in self.redis.zrevrange(self.index_key, 0, -1)]
            pipe = self.redis.pipeline(transaction=False)
            for code in codes:
                pipe.hgetall(self._key(code))
            rows = pipe.execute()

        # A link deleted between the two reads simply drops out
        return [record for record in map(self._to_record, rows) if record is not None]

    def _increment_clicks(self, code: str, clicked_at: datetime) -> bool:
        key = self._key(code)

        def bump(pipe):
            if not pipe.exists(key):
                return False
            pipe.multi()
            pipe.hincrby(key, "clicks", 1)
            pipe.hset(key, "last_clicked", clicked_at.isoformat())
            return True

        with self._errors("increment"):
            return self.redis.transaction(bump, key, value_from_callable=True)

    def _remove(self, code: str) -> bool:
        key = self._key(code)

        def drop(pipe):
            if not pipe.exists(key):
                return False
            pipe.multi()
            pipe.delete(key)
            pipe.zrem(self.index_key, code)
            return True

        with self._errors("delete"):
            return self.redis.transaction(drop, key, value_from_callable=True)

    def _contains(self, code: str) -> bool:
        with self._errors("exists"):
            return bool(self.redis.exists(self._key(code)))

    async def insert(self, code: str, url: str, created_at: datetime) -> LinkRecord:
        return await asyncio.to_thread(self._insert, code, url, created_at)

    async def fetch(self, code: str) -> Optional[LinkRecord]:
        return await asyncio.to_thread(self._fetch, code)

    async def fetch_all(self) -> List[LinkRecord]:
        return await asyncio.to_thread(self._fetch_all)

    async def increment_clicks(self, code: str, clicked_at: datetime) -> bool:
        return await asyncio.to_thread(self._increment_clicks, code, clicked_at)

    async def remove(self, code: str) -> bool:
        return await asyncio.to_thread(self._remove, code)

    async def contains(self, code: str) -> bool:
        return await asyncio.to_thread(self._contains, code)

    async def close(self) -> None:
        self.redis.close()


class InMemoryLinkStorage(LinkStorage):
    """
    In-memory storage using a Python dict.

    Good for development and testing; lost on restart and private to one
    process. The lock only guards dict access and is never held across
    an await.
    """

    def __init__(self):
        self._links: Dict[str, LinkRecord] = {}
        self._lock = threading.Lock()

    async def insert(self, code: str, url: str, created_at: datetime) -> LinkRecord:
        record = LinkRecord(code=code, url=url, clicks=0, last_clicked=None, created_at=created_at)
        with self._lock:
            if code in self._links:
                raise CodeConflict(code)
            self._links[code] = record
        return record.model_copy()

    async def fetch(self, code: str) -> Optional[LinkRecord]:
        with self._lock:
            record = self._links.get(code)
        return record.model_copy() if record else None

    async def fetch_all(self) -> List[LinkRecord]:
        with self._lock:
            records = list(self._links.values())
        records.sort(key=lambda record: (record.created_at, record.code), reverse=True)
        return [record.model_copy() for record in records]

    async def increment_clicks(self, code: str, clicked_at: datetime) -> bool:
        with self._lock:
            record = self._links.get(code)
            if record is None:
                return False
            self._links[code] = record.model_copy(
                update={"clicks": record.clicks + 1, "last_clicked": clicked_at}
            )
        return True

    async def remove(self, code: str) -> bool:
        with self._lock:
            return self._links.pop(code, None) is not None

    async def contains(self, code: str) -> bool:
        with self._lock:
            return code in self._links
