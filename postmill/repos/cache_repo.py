from typing import Any, List, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from postmill.models.cache_entry import CacheEntry


class CacheRepo:
    """
    Key-value render cache stored in Postgres.

    Entries never expire; they are only removed through delete().
    """

    def __init__(self, db: Session):
        self.db = db

    async def get(self, key: str) -> Optional[Any]:
        return await run_in_threadpool(self._get, key)

    async def put(self, key: str, value: Any) -> None:
        await run_in_threadpool(self._put, key, value)

    async def delete(self, key: str) -> None:
        await run_in_threadpool(self._delete, key)

    async def list_keys(self, prefix: str) -> List[str]:
        return await run_in_threadpool(self._list_keys, prefix)

    def _get(self, key: str) -> Optional[Any]:
        entry = self.db.query(CacheEntry).filter(CacheEntry.key == key).one_or_none()
        return entry.value if entry else None

    def _put(self, key: str, value: Any) -> None:
        self.db.merge(CacheEntry(key=key, value=value))
        self.db.commit()

    def _delete(self, key: str) -> None:
        self.db.query(CacheEntry).filter(CacheEntry.key == key).delete()
        self.db.commit()

    def _list_keys(self, prefix: str) -> List[str]:
        rows = (
            self.db.query(CacheEntry.key)
            .filter(CacheEntry.key.startswith(prefix, autoescape=True))
            .all()
        )
        return [key for (key,) in rows]
