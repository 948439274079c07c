"""
Search history cache: one snapshot of records per key, each with an expiry.

- Database-backed store (default): search_cache table, shared by every instance and
  kept across restarts. put is a single upsert statement, so a reader never sees half
  of a write and concurrent writers on one key end with the last complete write.
- Memory store: per-process dict. Only valid when a single instance runs.

Stores never evict. Validity (expires_at > now) is checked by the caller on each read;
an expired entry stays readable until it is overwritten.
"""
import copy
import json
import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.config import settings
from catalog.core.errors import CacheWriteFailed, StoreUnavailable
from catalog.models.search_cache import SearchCache

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    snapshot: list[dict]
    expires_at: datetime

    def is_valid(self, now: datetime | None = None) -> bool:
        return self.expires_at > (now or utcnow())


class SearchCacheStore(Protocol):
    """Interface for the search history cache. Same contract for DB and memory backends."""

    def get(self, key: str) -> CacheEntry | None:
        """Exact-match lookup. Returns expired entries too; the caller decides validity."""
        ...

    def put(self, key: str, snapshot: list[dict], ttl: timedelta, now: datetime | None = None) -> None:
        """
        Replace (or create) the entry for key with snapshot, expiring at now + ttl.
        now defaults to the time of the write. Raises CacheWriteFailed.
        """
        ...


class DbSearchCacheStore:
    """search_cache table, one row per key."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> CacheEntry | None:
        try:
            row = self.db.query(SearchCache).filter(SearchCache.cache_key == key).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable("Could not read search cache") from e
        if not row or row.expires_at is None:
            return None
        try:
            snapshot = json.loads(row.snapshot_json)
        except (TypeError, json.JSONDecodeError):
            logger.warning("Unreadable search cache row for key=%s; treating as miss", key)
            return None
        return CacheEntry(key=row.cache_key, snapshot=snapshot, expires_at=_as_utc(row.expires_at))

    def put(self, key: str, snapshot: list[dict], ttl: timedelta, now: datetime | None = None) -> None:
        written_at = _as_utc(now or utcnow())
        values = {
            "cache_key": key,
            "snapshot_json": json.dumps(snapshot),
            "expires_at": written_at + ttl,
            "updated_at": written_at,
        }
        try:
            self._upsert(values)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CacheWriteFailed(key, e) from e
        logger.debug("Search cache refreshed key=%s rows=%s", key, len(snapshot))

    def _dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    def _upsert(self, values: dict) -> None:
        dialect = self._dialect_name()
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            # No native upsert: merge inside the session transaction, committed as one unit
            self.db.merge(SearchCache(**values))
            return
        stmt = insert(SearchCache).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["cache_key"],
            set_={
                "snapshot_json": stmt.excluded.snapshot_json,
                "expires_at": stmt.excluded.expires_at,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        self.db.execute(stmt)


class MemorySearchCacheStore:
    """Process-local cache. Never shared between instances."""

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    # Snapshots are copied in and out so callers never share the stored lists.
    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        return replace(entry, snapshot=copy.deepcopy(entry.snapshot))

    def put(self, key: str, snapshot: list[dict], ttl: timedelta, now: datetime | None = None) -> None:
        written_at = now or utcnow()
        entry = CacheEntry(key=key, snapshot=copy.deepcopy(snapshot), expires_at=written_at + ttl)
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


memory_search_cache = MemorySearchCacheStore()


def get_search_cache(db: Session) -> SearchCacheStore:
    """Cache store for this request, per settings.cache_backend."""
    if settings.cache_backend == "memory":
        return memory_search_cache
    return DbSearchCacheStore(db)
