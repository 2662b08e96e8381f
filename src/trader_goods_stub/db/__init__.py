from trader_goods_stub.db.engine import get_engine
from trader_goods_stub.db.memory import InMemoryTraderStore
from trader_goods_stub.db.postgres import PostgresTraderStore
from trader_goods_stub.db.tables import goods_item_records, metadata, trader_profiles

__all__ = [
    "InMemoryTraderStore",
    "PostgresTraderStore",
    "get_engine",
    "goods_item_records",
    "metadata",
    "trader_profiles",
]
