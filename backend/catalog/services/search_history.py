"""
Search history read path: serve from the search cache while valid, else recompute
from searches and refresh the cache.

Effective key is the stripped EAN, or RECENT_SEARCHES_CACHE_KEY when no EAN is given
(None, "" or whitespace). A new search does not invalidate cached snapshots; readers
may see the old snapshot (empty ones included) until it expires. Concurrent misses on
one key each recompute; the last cache write wins.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from catalog.core.constants import RECENT_SEARCHES_CACHE_KEY, RECENT_SEARCHES_LIMIT, SEARCH_CACHE_TTL
from catalog.core.ean import normalize_ean
from catalog.core.errors import CacheWriteFailed, MalformedKey
from catalog.services.search_cache import SearchCacheStore, get_search_cache, utcnow
from catalog.services.search_store import find_searches

logger = logging.getLogger(__name__)


def effective_cache_key(ean: str | None) -> str:
    """Raises MalformedKey for a literal RECENT_SEARCHES_CACHE_KEY filter."""
    ean = normalize_ean(ean)
    if ean == RECENT_SEARCHES_CACHE_KEY:
        raise MalformedKey(ean)
    return ean or RECENT_SEARCHES_CACHE_KEY


def get_search_history(
    db: Session,
    ean: str | None = None,
    limit: int = RECENT_SEARCHES_LIMIT,
    cache: SearchCacheStore | None = None,
    ttl: timedelta = SEARCH_CACHE_TTL,
    now: datetime | None = None,
) -> list[dict]:
    """
    Searches for ean (all, newest first) or the `limit` most recent searches when ean is blank.

    StoreUnavailable from reading searches propagates and nothing is cached. A failed
    cache write is logged and the fresh result is still returned. MalformedKey is raised
    before any store access when ean is the reserved recent-searches key.
    """
    ean = normalize_ean(ean)
    key = effective_cache_key(ean)
    cache = cache if cache is not None else get_search_cache(db)

    entry = cache.get(key)
    if entry is not None and entry.is_valid(now or utcnow()):
        logger.debug("Search history cache hit key=%s", key)
        return entry.snapshot

    logger.debug("Search history cache %s key=%s", "expired" if entry else "miss", key)
    if ean is not None:
        result = find_searches(db, ean=ean)
    else:
        result = find_searches(db, limit=limit)

    try:
        cache.put(key, result, ttl)
    except CacheWriteFailed as e:
        logger.warning("Search history cache write failed for key=%s: %s", key, e, exc_info=True)
    return result
