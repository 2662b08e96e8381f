import logging
from datetime import datetime

from trader_goods_stub.core.errors import ProfileNotFoundError
from trader_goods_stub.core.ports.store import TraderStore
from trader_goods_stub.models import CreateTraderProfileRequest, MaintainTraderProfileRequest, TraderProfile

logger = logging.getLogger(__name__)


def _to_profile(request: CreateTraderProfileRequest, now: datetime) -> TraderProfile:
    return TraderProfile(**request.model_dump(), last_updated=now)


async def create_profile(store: TraderStore, request: CreateTraderProfileRequest, now: datetime) -> TraderProfile:
    """Insert a new profile; ``DuplicateEoriError`` if the EORI already has one."""
    profile = _to_profile(request, now)
    await store.insert_profile(profile)
    logger.info("Created profile for %s", profile.eori)
    return profile


async def maintain_profile(store: TraderStore, request: MaintainTraderProfileRequest, now: datetime) -> TraderProfile:
    profile = _to_profile(request, now)
    await store.upsert_profile(profile)
    logger.info("Maintained profile for %s", profile.eori)
    return profile


async def get_profile(store: TraderStore, eori: str) -> TraderProfile:
    profile = await store.get_profile(eori)
    if profile is None:
        raise ProfileNotFoundError()
    return profile
