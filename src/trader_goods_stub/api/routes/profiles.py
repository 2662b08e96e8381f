from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Response, status

from trader_goods_stub.api.body import validated_body
from trader_goods_stub.api.dependencies import get_now, get_store
from trader_goods_stub.api.headers import ValidatedHeaders, require_read_headers
from trader_goods_stub.core import profiles
from trader_goods_stub.core.ports.store import TraderStore
from trader_goods_stub.core.schemas import CREATE_PROFILE_SCHEMA, MAINTAIN_PROFILE_SCHEMA
from trader_goods_stub.models import CreateTraderProfileRequest, MaintainTraderProfileRequest, TraderProfileResponse

router = APIRouter(prefix="/tgp", tags=["profiles"])


@router.post("/createprofile/v1", status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: CreateTraderProfileRequest = Depends(validated_body(CREATE_PROFILE_SCHEMA, CreateTraderProfileRequest)),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> Response:
    await profiles.create_profile(store, body, now)
    return Response(status_code=status.HTTP_201_CREATED)


@router.put("/maintainprofile/v1", response_model=TraderProfileResponse)
async def maintain_profile(
    body: MaintainTraderProfileRequest = Depends(
        validated_body(MAINTAIN_PROFILE_SCHEMA, MaintainTraderProfileRequest)
    ),
    store: TraderStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> TraderProfileResponse:
    profile = await profiles.maintain_profile(store, body, now)
    return TraderProfileResponse.create_from(profile)


@router.get("/getprofile/v1/{eori}", response_model=TraderProfileResponse)
async def get_profile(
    eori: str,
    _headers: ValidatedHeaders = Depends(require_read_headers),
    store: TraderStore = Depends(get_store),
) -> TraderProfileResponse:
    return TraderProfileResponse.create_from(await profiles.get_profile(store, eori))
