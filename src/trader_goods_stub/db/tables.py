import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

metadata = sa.MetaData()

goods_item_records = sa.Table(
    "goods_item_records",
    metadata,
    sa.Column("record_id", sa.Text, primary_key=True),
    sa.Column("eori", sa.Text, nullable=False),
    sa.Column("trader_ref", sa.Text, nullable=False),
    sa.Column("active", sa.Boolean, nullable=False),
    sa.Column("updated_date_time", sa.DateTime(timezone=True), nullable=False),
    sa.Column("document", postgresql.JSONB, nullable=False),
    sa.Index("ix_goods_item_records_eori_updated", "eori", "updated_date_time", "record_id"),
    sa.Index(
        "uq_goods_item_records_active_trader_ref",
        "eori",
        "trader_ref",
        unique=True,
        postgresql_where=sa.text("active"),
    ),
)

trader_profiles = sa.Table(
    "trader_profiles",
    metadata,
    sa.Column("eori", sa.Text, primary_key=True),
    sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
    sa.Column("document", postgresql.JSONB, nullable=False),
)
