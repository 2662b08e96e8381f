from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status

from trader_goods_stub.api.body import validated_body
from trader_goods_stub.api.dependencies import get_now, get_store
from trader_goods_stub.api.errors import RequestRejectedError
from trader_goods_stub.api.headers import ValidatedHeaders, require_read_headers
from trader_goods_stub.api.schemas import GetGoodsItemsResponse
from trader_goods_stub.config import Settings, get_settings
from trader_goods_stub.core import records
from trader_goods_stub.core.pagination import compute_pagination
from trader_goods_stub.core.ports.store import TraderStore
from trader_goods_stub.core.schemas import (
    CREATE_RECORD_SCHEMA,
    PATCH_RECORD_SCHEMA,
    REMOVE_RECORD_SCHEMA,
    UPDATE_RECORD_SCHEMA,
)
from trader_goods_stub.models import (
    CreateGoodsItemRecordRequest,
    GoodsItemRecordResponse,
    RemoveGoodsItemRecordRequest,
    UpdateGoodsItemRecordRequest,
)

router = APIRouter(prefix="/tgp", tags=["records"])

CREATE_RESPONSE_EXCLUDE = {"locked", "src_system_name"}
# includeInactive is a stub extension; 032 is not an upstream code
INCLUDE_INACTIVE_CODE = "032"


@dataclass(frozen=True)
class ListingParams:
    page: int
    size: int
    updated_since: datetime | None
    include_inactive: bool


def _invalid_parameter(code: str) -> str:
    return f"error: {code}, message: Invalid Request Parameter"


def _parse_int(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


def _parse_flag(raw: str) -> bool | None:
    return {"true": True, "false": False}.get(raw.lower())


def _parse_timestamp(raw: str) -> datetime | None:
    try:
        value = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return value if value.tzinfo is not None else None


def listing_params(
    page: str | None = Query(None),
    size: str | None = Query(None),
    last_updated_date: str | None = Query(None, alias="lastUpdatedDate"),
    include_inactive: str | None = Query(None, alias="includeInactive"),
    settings: Settings = Depends(get_settings),
) -> ListingParams:
    """Parse the listing query string, reporting every invalid parameter together."""
    failures: list[str] = []

    page_number = 0
    if page is not None:
        parsed = _parse_int(page)
        if parsed is None or parsed < 0:
            failures.append(_invalid_parameter("029"))
        else:
            page_number = parsed

    page_size = settings.default_page_size
    if size is not None:
        parsed = _parse_int(size)
        if parsed is None or not 1 <= parsed <= settings.max_page_size:
            failures.append(_invalid_parameter("030"))
        else:
            page_size = parsed

    updated_since = None
    if last_updated_date is not None:
        updated_since = _parse_timestamp(last_updated_date)
        if updated_since is None:
            failures.append(_invalid_parameter("028"))

    show_inactive = False
    if include_inactive is not None:
        flag = _parse_flag(include_inactive)
        if flag is None:
            failures.append(_invalid_parameter(INCLUDE_INACTIVE_CODE))
        else:
            show_inactive = flag

    if failures:
        raise RequestRejectedError(failures)
    return ListingParams(
        page=page_number, size=page_size, updated_since=updated_since, include_inactive=show_inactive
    )


@router.post(
    "/createrecord/v1",
    status_code=status.HTTP_201_CREATED,
    response_model=GoodsItemRecordResponse,
    response_model_exclude=CREATE_RESPONSE_EXCLUDE,
)
async def create_record(
    body: CreateGoodsItemRecordRequest = Depends(validated_body(CREATE_RECORD_SCHEMA, CreateGoodsItemRecordRequest)),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> GoodsItemRecordResponse:
    record, profile = await records.create_record(store, body, now)
    return GoodsItemRecordResponse.create_from(record, profile, now)


@router.get("/getrecords/v1/{eori}", response_model=GetGoodsItemsResponse)
async def get_records(
    eori: str,
    _headers: ValidatedHeaders = Depends(require_read_headers),
    params: ListingParams = Depends(listing_params),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> GetGoodsItemsResponse:
    listing, profile = await records.list_records(
        store,
        eori,
        params.page,
        params.size,
        updated_since=params.updated_since,
        include_inactive=params.include_inactive,
    )
    return GetGoodsItemsResponse(
        goods_item_records=[GoodsItemRecordResponse.create_from(r, profile, now) for r in listing.records],
        pagination=listing.pagination,
    )


@router.get("/getrecords/v1/{eori}/{record_id}", response_model=GetGoodsItemsResponse)
async def get_record(
    eori: str,
    record_id: str,
    _headers: ValidatedHeaders = Depends(require_read_headers),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> GetGoodsItemsResponse:
    record, profile = await records.get_record(store, eori, record_id)
    return GetGoodsItemsResponse(
        goods_item_records=[GoodsItemRecordResponse.create_from(record, profile, now)],
        pagination=compute_pagination(1, 0, 1),
    )


@router.patch("/updaterecord/v1", response_model=GoodsItemRecordResponse)
async def patch_record(
    body: UpdateGoodsItemRecordRequest = Depends(validated_body(PATCH_RECORD_SCHEMA, UpdateGoodsItemRecordRequest)),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> GoodsItemRecordResponse:
    record, profile = await records.patch_record(store, body, now)
    return GoodsItemRecordResponse.create_from(record, profile, now)


@router.put("/updaterecord/v1", response_model=GoodsItemRecordResponse)
async def update_record(
    body: UpdateGoodsItemRecordRequest = Depends(validated_body(UPDATE_RECORD_SCHEMA, UpdateGoodsItemRecordRequest)),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> GoodsItemRecordResponse:
    record, profile = await records.update_record(store, body, now)
    return GoodsItemRecordResponse.create_from(record, profile, now)


@router.put("/removerecord/v1")
async def remove_record(
    body: RemoveGoodsItemRecordRequest = Depends(validated_body(REMOVE_RECORD_SCHEMA, RemoveGoodsItemRecordRequest)),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> Response:
    await records.remove_record(store, body, now)
    return Response(status_code=status.HTTP_200_OK)
