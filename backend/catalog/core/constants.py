"""
Centralized constants for search history and its cache.

Change the TTL, the recent-view size or the sentinel key here instead of scattering
literals across services and routes. TTL and limit come from settings (env-driven).
"""
import re
from datetime import timedelta

from catalog.config import settings

# Cache key for "no EAN filter" (recent searches view). EANs are digits only, so a key
# with underscores can never collide with a real filter key.
RECENT_SEARCHES_CACHE_KEY = "__recent__"

# How long a cached search history snapshot is served before it is recomputed
SEARCH_CACHE_TTL = timedelta(seconds=settings.search_cache_ttl_seconds)

# Size of the unfiltered "recent searches" view
RECENT_SEARCHES_LIMIT = settings.recent_searches_limit

# EAN-8 or EAN-13 (format only, no checksum)
EAN_PATTERN = re.compile(r"^(\d{8}|\d{13})$")

# Column size for searches.ean and search_cache.cache_key
CACHE_KEY_MAX_LENGTH = 64
