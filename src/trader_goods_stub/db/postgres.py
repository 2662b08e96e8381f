import logging
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from trader_goods_stub.core.errors import DuplicateEoriError, DuplicateTraderRefError
from trader_goods_stub.core.ports.store import RecordSlice
from trader_goods_stub.db.tables import goods_item_records, trader_profiles
from trader_goods_stub.models import GoodsItemRecord, TraderProfile

logger = logging.getLogger(__name__)


def _record_row(record: GoodsItemRecord) -> dict[str, Any]:
    return {
        "record_id": record.record_id,
        "eori": record.goods_item.eori,
        "trader_ref": record.goods_item.trader_ref,
        "active": record.metadata.active,
        "updated_date_time": record.metadata.updated_date_time,
        "document": record.model_dump(mode="json"),
    }


def _profile_row(profile: TraderProfile) -> dict[str, Any]:
    return {
        "eori": profile.eori,
        "last_updated": profile.last_updated,
        "document": profile.model_dump(mode="json"),
    }


class PostgresTraderStore:
    """``TraderStore`` backed by PostgreSQL; rows keep the full model as a JSONB document."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def ensure_ready(self) -> None:
        """Fail fast if the migrated tables are missing."""
        async with self._engine.connect() as conn:
            await conn.execute(sa.select(goods_item_records.c.record_id).limit(1))
            await conn.execute(sa.select(trader_profiles.c.eori).limit(1))

    async def insert_record(self, record: GoodsItemRecord) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.execute(goods_item_records.insert().values(**_record_row(record)))
        except IntegrityError as exc:
            logger.debug("Rejected record %s: %s", record.record_id, exc.orig)
            raise DuplicateTraderRefError() from exc

    async def get_record(self, eori: str, record_id: str) -> GoodsItemRecord | None:
        stmt = sa.select(goods_item_records.c.document).where(
            goods_item_records.c.eori == eori,
            goods_item_records.c.record_id == record_id,
        )
        async with self._engine.connect() as conn:
            document = (await conn.execute(stmt)).scalar_one_or_none()
        return None if document is None else GoodsItemRecord.model_validate(document)

    async def replace_record(self, record: GoodsItemRecord) -> None:
        row = _record_row(record)
        stmt = (
            goods_item_records.update()
            .where(goods_item_records.c.record_id == row.pop("record_id"))
            .values(**row)
        )
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
        except IntegrityError as exc:
            logger.debug("Rejected update of record %s: %s", record.record_id, exc.orig)
            raise DuplicateTraderRefError() from exc
        if result.rowcount != 1:
            raise KeyError(record.record_id)

    async def find_records(
        self,
        eori: str,
        *,
        updated_since: datetime | None = None,
        include_inactive: bool = False,
        page: int = 0,
        size: int = 500,
    ) -> RecordSlice:
        conditions = [goods_item_records.c.eori == eori]
        if not include_inactive:
            conditions.append(goods_item_records.c.active.is_(True))
        if updated_since is not None:
            conditions.append(goods_item_records.c.updated_date_time >= updated_since)

        count_stmt = sa.select(sa.func.count()).select_from(goods_item_records).where(*conditions)
        page_stmt = (
            sa.select(goods_item_records.c.document)
            .where(*conditions)
            .order_by(goods_item_records.c.updated_date_time, goods_item_records.c.record_id)
            .offset(page * size)
            .limit(size)
        )
        async with self._engine.connect() as conn:
            total = (await conn.execute(count_stmt)).scalar_one()
            documents = (await conn.execute(page_stmt)).scalars().all()
        return RecordSlice(
            total_count=int(total),
            records=[GoodsItemRecord.model_validate(document) for document in documents],
        )

    async def insert_profile(self, profile: TraderProfile) -> None:
        try:
            async with self._engine.begin() as conn:
                await conn.execute(trader_profiles.insert().values(**_profile_row(profile)))
        except IntegrityError as exc:
            raise DuplicateEoriError() from exc

    async def upsert_profile(self, profile: TraderProfile) -> None:
        row = _profile_row(profile)
        stmt = insert(trader_profiles).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=[trader_profiles.c.eori],
            set_={"last_updated": stmt.excluded.last_updated, "document": stmt.excluded.document},
        )
        async with self._engine.begin() as conn:
            await conn.execute(stmt)

    async def get_profile(self, eori: str) -> TraderProfile | None:
        stmt = sa.select(trader_profiles.c.document).where(trader_profiles.c.eori == eori)
        async with self._engine.connect() as conn:
            document = (await conn.execute(stmt)).scalar_one_or_none()
        return None if document is None else TraderProfile.model_validate(document)

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(sa.text("SELECT 1"))
            return True
        except Exception:
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
