"""
Cached search history snapshot per effective key (EAN or the recent-searches sentinel).
One row per key; rows are overwritten on refresh. Only the admin reset deletes them.
"""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from catalog.core.constants import CACHE_KEY_MAX_LENGTH
from catalog.db.base import Base


class SearchCache(Base):
    __tablename__ = "search_cache"

    cache_key = Column(String(CACHE_KEY_MAX_LENGTH), primary_key=True)
    snapshot_json = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
