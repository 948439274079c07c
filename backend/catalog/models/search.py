"""One generated product description per EAN lookup. Immutable once written."""
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from catalog.core.constants import CACHE_KEY_MAX_LENGTH
from catalog.db.base import Base


class Search(Base):
    __tablename__ = "searches"

    id = Column(Integer, primary_key=True, index=True)
    ean = Column(String(CACHE_KEY_MAX_LENGTH), nullable=False, index=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
