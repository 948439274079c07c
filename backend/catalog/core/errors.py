"""
Error types for the search history core and their mapping to HTTP responses.
Constants and a reusable helper so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_INTERNAL_ERROR = 500

MSG_INVALID_EAN = "Invalid EAN code. Please enter 8 or 13 digits."
MSG_HISTORY_UNAVAILABLE = "Failed to fetch search history"


class CatalogError(Exception):
    """Base class for errors raised by catalog services."""


class StoreUnavailable(CatalogError):
    """The database could not be read or written. Not retried; surfaces to the caller."""


class MalformedKey(CatalogError):
    """EAN filter does not match the 8 or 13 digit format."""

    def __init__(self, ean: str):
        super().__init__(f"Malformed EAN: {ean!r}")
        self.ean = ean


class CacheWriteFailed(CatalogError):
    """Writing a search history snapshot to the cache failed. Non-fatal for reads."""

    def __init__(self, cache_key: str, cause: Exception | None = None):
        super().__init__(f"Cache write failed for key {cache_key!r}: {cause}")
        self.cache_key = cache_key
        self.cause = cause


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code, detail_message)
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

# First match wins.
CATALOG_ERROR_RULES: list[tuple[type[Exception], int, str]] = [
    (MalformedKey, STATUS_BAD_REQUEST, MSG_INVALID_EAN),
    (StoreUnavailable, STATUS_INTERNAL_ERROR, MSG_HISTORY_UNAVAILABLE),
]


def catalog_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a catalog service into an HTTPException.
    Uses CATALOG_ERROR_RULES for known error types; otherwise returns 500 with a generic message.
    """
    for exc_type, status_code, detail in CATALOG_ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=MSG_HISTORY_UNAVAILABLE)
