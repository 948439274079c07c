"""
Search records: written once per generated description, read newest first.
Never updated or deleted here.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.core.errors import StoreUnavailable
from catalog.models.search import Search

logger = logging.getLogger(__name__)


def _iso_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def search_to_dict(row: Search) -> dict:
    """JSON-ready record; the same shape is stored in cache snapshots."""
    return {
        "id": row.id,
        "ean": row.ean,
        "description": row.description,
        "created_at": _iso_utc(row.created_at),
    }


def insert_search(
    db: Session,
    ean: str,
    description: str,
    created_at: datetime | None = None,
) -> dict:
    """Store one search result. created_at defaults to the DB clock."""
    row = Search(ean=ean, description=description)
    if created_at is not None:
        row.created_at = created_at
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreUnavailable(f"Could not save search for ean={ean}") from e
    logger.info("Saved search id=%s ean=%s", row.id, row.ean)
    return search_to_dict(row)


def find_searches(db: Session, ean: str | None = None, limit: int | None = None) -> list[dict]:
    """
    Return searches newest first (created_at desc, id desc for ties).
    ean filters to that exact EAN; limit caps the number of rows (None = all).
    """
    q = db.query(Search)
    if ean is not None:
        q = q.filter(Search.ean == ean)
    q = q.order_by(Search.created_at.desc(), Search.id.desc())
    if limit is not None:
        q = q.limit(limit)
    try:
        rows = q.all()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreUnavailable("Could not read searches") from e
    return [search_to_dict(r) for r in rows]
