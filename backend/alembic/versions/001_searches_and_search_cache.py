"""Add searches table (generated descriptions) and search_cache table (history snapshots).

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

- searches: one row per generated description, newest first by created_at.
- search_cache: one snapshot per EAN or the recent-searches key, with expires_at.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "searches",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ean", sa.String(64), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_searches_id", "searches", ["id"])
    op.create_index("ix_searches_ean", "searches", ["ean"])
    op.create_index("ix_searches_created_at", "searches", ["created_at"])
    op.create_table(
        "search_cache",
        sa.Column("cache_key", sa.String(64), primary_key=True),
        sa.Column("snapshot_json", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("search_cache")
    op.drop_index("ix_searches_created_at", table_name="searches")
    op.drop_index("ix_searches_ean", table_name="searches")
    op.drop_index("ix_searches_id", table_name="searches")
    op.drop_table("searches")
