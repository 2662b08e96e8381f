"""Initial schema: goods_item_records and trader_profiles tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "goods_item_records",
        sa.Column("record_id", sa.Text, primary_key=True),
        sa.Column("eori", sa.Text, nullable=False),
        sa.Column("trader_ref", sa.Text, nullable=False),
        sa.Column("active", sa.Boolean, nullable=False),
        sa.Column("updated_date_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("document", postgresql.JSONB, nullable=False),
    )
    op.create_index(
        "ix_goods_item_records_eori_updated",
        "goods_item_records",
        ["eori", "updated_date_time", "record_id"],
    )
    op.create_index(
        "uq_goods_item_records_active_trader_ref",
        "goods_item_records",
        ["eori", "trader_ref"],
        unique=True,
        postgresql_where=sa.text("active"),
    )
    op.create_table(
        "trader_profiles",
        sa.Column("eori", sa.Text, primary_key=True),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.Column("document", postgresql.JSONB, nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("trader_profiles")
    op.drop_index("uq_goods_item_records_active_trader_ref", table_name="goods_item_records")
    op.drop_index("ix_goods_item_records_eori_updated", table_name="goods_item_records")
    op.drop_table("goods_item_records")
