from datetime import datetime

from trader_goods_stub.core.errors import DuplicateEoriError, DuplicateTraderRefError
from trader_goods_stub.core.ports.store import RecordSlice
from trader_goods_stub.models import GoodsItemRecord, TraderProfile


class InMemoryTraderStore:
    def __init__(self) -> None:
        self.records: dict[tuple[str, str], GoodsItemRecord] = {}
        self.profiles: dict[str, TraderProfile] = {}

    async def ensure_ready(self) -> None:
        return None

    def _check_trader_ref(self, record: GoodsItemRecord) -> None:
        if not record.metadata.active:
            return
        item = record.goods_item
        for other in self.records.values():
            if (
                other.record_id != record.record_id
                and other.metadata.active
                and other.goods_item.eori == item.eori
                and other.goods_item.trader_ref == item.trader_ref
            ):
                raise DuplicateTraderRefError()

    async def insert_record(self, record: GoodsItemRecord) -> None:
        self._check_trader_ref(record)
        self.records[(record.goods_item.eori, record.record_id)] = record

    async def get_record(self, eori: str, record_id: str) -> GoodsItemRecord | None:
        return self.records.get((eori, record_id))

    async def replace_record(self, record: GoodsItemRecord) -> None:
        key = (record.goods_item.eori, record.record_id)
        if key not in self.records:
            raise KeyError(key)
        self._check_trader_ref(record)
        self.records[key] = record

    async def find_records(
        self,
        eori: str,
        *,
        updated_since: datetime | None = None,
        include_inactive: bool = False,
        page: int = 0,
        size: int = 500,
    ) -> RecordSlice:
        matching = sorted(
            (
                r
                for (record_eori, _), r in self.records.items()
                if record_eori == eori
                and (include_inactive or r.metadata.active)
                and (updated_since is None or r.metadata.updated_date_time >= updated_since)
            ),
            key=lambda r: (r.metadata.updated_date_time, r.record_id),
        )
        start = page * size
        return RecordSlice(total_count=len(matching), records=matching[start : start + size])

    async def insert_profile(self, profile: TraderProfile) -> None:
        if profile.eori in self.profiles:
            raise DuplicateEoriError()
        self.profiles[profile.eori] = profile

    async def upsert_profile(self, profile: TraderProfile) -> None:
        self.profiles[profile.eori] = profile

    async def get_profile(self, eori: str) -> TraderProfile | None:
        return self.profiles.get(eori)

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        return None
