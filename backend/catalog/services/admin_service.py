"""
Admin: drop cached search history so the next read recomputes from searches.
Searches themselves are never deleted. The memory cache lives in the server process;
restart the backend to clear it.
"""
import logging

from sqlalchemy.orm import Session

from catalog.models.search_cache import SearchCache

logger = logging.getLogger(__name__)


def clear_search_cache(db: Session) -> dict[str, int]:
    """
    Delete all rows from search_cache.
    Returns dict of table -> deleted count.
    """
    deleted: dict[str, int] = {}
    deleted["search_cache"] = db.query(SearchCache).delete()
    db.commit()
    logger.info("Cleared search cache: %s", deleted)
    return deleted
