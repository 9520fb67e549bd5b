"""Create the blob store and patron link tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "blobs",
        sa.Column("name", sa.String(length=64), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "patron_links",
        sa.Column("patron_id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
    )
    op.create_index("ix_patron_links_user_id", "patron_links", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_patron_links_user_id", table_name="patron_links")
    op.drop_table("patron_links")
    op.drop_table("blobs")
