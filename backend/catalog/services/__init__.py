from catalog.services.search_cache import get_search_cache
from catalog.services.search_history import effective_cache_key, get_search_history
from catalog.services.search_store import find_searches, insert_search

__all__ = ["effective_cache_key", "find_searches", "get_search_cache", "get_search_history", "insert_search"]
