from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime, timezone

from fastapi import Depends, Request

from trader_goods_stub.config import Settings, get_settings
from trader_goods_stub.core.ports.store import TraderStore
from trader_goods_stub.core.schemas import SchemaRegistry
from trader_goods_stub.db.engine import get_engine
from trader_goods_stub.db.memory import InMemoryTraderStore
from trader_goods_stub.db.postgres import PostgresTraderStore

_store: TraderStore | None = None


def build_store(settings: Settings) -> TraderStore:
    if settings.store_backend == "postgres":
        return PostgresTraderStore(get_engine(settings.database_url))
    return InMemoryTraderStore()


async def get_store(settings: Settings = Depends(get_settings)) -> AsyncIterator[TraderStore]:
    """Yield the process-wide ``TraderStore``, creating it lazily on first call."""
    global _store  # noqa: PLW0603
    if _store is None:
        _store = build_store(settings)
    yield _store


async def shutdown_store() -> None:
    global _store  # noqa: PLW0603
    if _store is not None:
        await _store.dispose()
        _store = None


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_schema_registry(request: Request) -> SchemaRegistry:
    registry: SchemaRegistry = request.app.state.schema_registry
    return registry
