"""
Search history API: recent searches and per-EAN history (read through the search cache),
plus recording a search produced by the description generator.
"""
import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from catalog.core.constants import CACHE_KEY_MAX_LENGTH
from catalog.core.ean import validate_ean
from catalog.core.errors import CatalogError, MalformedKey, catalog_error_to_http
from catalog.db.session import get_db
from catalog.services.search_cache import get_search_cache
from catalog.services.search_history import get_search_history
from catalog.services.search_store import insert_search

router = APIRouter()
logger = logging.getLogger(__name__)


class SearchCreate(BaseModel):
    ean: str = Field(..., min_length=1, max_length=CACHE_KEY_MAX_LENGTH, description="EAN-8 or EAN-13 code")
    description: str = Field(..., min_length=1)


@router.get("/searchHistory", response_model=list)
def search_history(
    ean: str | None = Query(default=None, max_length=CACHE_KEY_MAX_LENGTH),
    db: Session = Depends(get_db),
):
    """
    Without ean: the 5 most recent searches. With ean: every search for that EAN, newest first.
    Served from the search cache for up to an hour, so new searches can show up late.
    """
    try:
        key = validate_ean(ean)
        return get_search_history(db, key, cache=get_search_cache(db))
    except MalformedKey as e:
        raise catalog_error_to_http(e)
    except CatalogError as e:
        logger.error("Error fetching search history: %s", e, exc_info=True)
        raise catalog_error_to_http(e)


@router.post("/searches", status_code=201)
def record_search(body: SearchCreate, db: Session = Depends(get_db)):
    """Save one generated description. Does not touch cached history."""
    try:
        ean = validate_ean(body.ean)
        if ean is None:
            raise MalformedKey(body.ean)
        return insert_search(db, ean=ean, description=body.description)
    except MalformedKey as e:
        raise catalog_error_to_http(e)
    except CatalogError as e:
        logger.error("Error saving search: %s", e, exc_info=True)
        raise catalog_error_to_http(e)
