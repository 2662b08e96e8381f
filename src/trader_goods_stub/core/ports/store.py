from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from trader_goods_stub.models import GoodsItemRecord, TraderProfile


@dataclass(frozen=True)
class RecordSlice:
    total_count: int
    records: list[GoodsItemRecord]


class TraderStore(Protocol):
    async def ensure_ready(self) -> None: ...

    async def insert_record(self, record: GoodsItemRecord) -> None: ...

    async def get_record(self, eori: str, record_id: str) -> GoodsItemRecord | None: ...

    async def replace_record(self, record: GoodsItemRecord) -> None: ...

    async def find_records(
        self,
        eori: str,
        *,
        updated_since: datetime | None = None,
        include_inactive: bool = False,
        page: int = 0,
        size: int = 500,
    ) -> RecordSlice: ...

    async def insert_profile(self, profile: TraderProfile) -> None: ...

    async def upsert_profile(self, profile: TraderProfile) -> None: ...

    async def get_profile(self, eori: str) -> TraderProfile | None: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...
