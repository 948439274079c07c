"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. DELETE in scripts).
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "searches",
    "search_cache",
)

# Tables cleared when resetting the search history cache.
CACHE_TABLE_NAMES = ("search_cache",)
