from catalog.models.search import Search
from catalog.models.search_cache import SearchCache

__all__ = [
    "Search",
    "SearchCache",
]
