import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from trader_goods_stub.core.accreditation import INITIAL_STATUS, transition
from trader_goods_stub.core.errors import (
    ProfileNotFoundError,
    RecordAlreadyRemovedError,
    RecordInactiveError,
    RecordLockedError,
    RecordNotFoundError,
)
from trader_goods_stub.core.pagination import PageDescriptor, compute_pagination
from trader_goods_stub.core.ports.store import TraderStore
from trader_goods_stub.models import (
    CreateGoodsItemRecordRequest,
    GoodsItem,
    GoodsItemMetadata,
    GoodsItemRecord,
    MetadataPatchRequest,
    RemoveGoodsItemRecordRequest,
    TraderProfile,
    UpdateGoodsItemRecordRequest,
)

logger = logging.getLogger(__name__)

_IDENTITY_FIELDS = {"record_id", "eori", "actor_id"}
_REQUIRED_ITEM_FIELDS = {name for name, info in GoodsItem.model_fields.items() if info.is_required()}


@dataclass(frozen=True)
class RecordListing:
    records: list[GoodsItemRecord]
    pagination: PageDescriptor


async def require_profile(store: TraderStore, eori: str) -> TraderProfile:
    profile = await store.get_profile(eori)
    if profile is None:
        raise ProfileNotFoundError()
    return profile


async def create_record(
    store: TraderStore, request: CreateGoodsItemRecordRequest, now: datetime
) -> tuple[GoodsItemRecord, TraderProfile]:
    profile = await require_profile(store, request.eori)
    item = GoodsItem.model_validate(
        {**request.model_dump(exclude={"assessments"}), "assessments": request.assessments or []}
    )
    record = GoodsItemRecord(
        record_id=str(uuid.uuid4()),
        goods_item=item,
        metadata=GoodsItemMetadata(
            accreditation_status=INITIAL_STATUS,
            created_date_time=now,
            updated_date_time=now,
        ),
    )
    await store.insert_record(record)
    logger.info("Created record %s for %s", record.record_id, item.eori)
    return record, profile


async def get_record(store: TraderStore, eori: str, record_id: str) -> tuple[GoodsItemRecord, TraderProfile]:
    """Fetch one record; soft-deleted records are still returned."""
    profile = await require_profile(store, eori)
    record = await store.get_record(eori, record_id)
    if record is None:
        raise RecordNotFoundError()
    return record, profile


async def list_records(
    store: TraderStore,
    eori: str,
    page: int,
    size: int,
    updated_since: datetime | None = None,
    include_inactive: bool = False,
) -> tuple[RecordListing, TraderProfile]:
    """Return one page of an EORI's records together with its page descriptor.

    A page past the end is clamped to the last page, and the records returned
    are those of the clamped page.
    """
    profile = await require_profile(store, eori)
    query = {"updated_since": updated_since, "include_inactive": include_inactive, "size": size}
    result = await store.find_records(eori, page=page, **query)
    pagination = compute_pagination(result.total_count, page, size)
    if pagination.current_page != page:
        result = await store.find_records(eori, page=pagination.current_page, **query)
    return RecordListing(records=result.records, pagination=pagination), profile


def _ensure_mutable(record: GoodsItemRecord | None) -> GoodsItemRecord:
    if record is None:
        raise RecordNotFoundError()
    if not record.metadata.active:
        raise RecordInactiveError()
    if record.metadata.locked:
        raise RecordLockedError()
    return record


def _bump(metadata: GoodsItemMetadata, now: datetime, **changes: Any) -> GoodsItemMetadata:
    return metadata.model_copy(update={**changes, "version": metadata.version + 1, "updated_date_time": now})


async def _apply_item_changes(
    store: TraderStore, eori: str, record_id: str, changes: dict[str, Any], now: datetime
) -> tuple[GoodsItemRecord, TraderProfile]:
    profile = await require_profile(store, eori)
    record = _ensure_mutable(await store.get_record(eori, record_id))
    item = GoodsItem.model_validate({**record.goods_item.model_dump(), **changes})
    updated = record.model_copy(update={"goods_item": item, "metadata": _bump(record.metadata, now)})
    await store.replace_record(updated)
    logger.info("Updated record %s to version %d", record_id, updated.metadata.version)
    return updated, profile


async def patch_record(
    store: TraderStore, request: UpdateGoodsItemRecordRequest, now: datetime
) -> tuple[GoodsItemRecord, TraderProfile]:
    """Apply only the payload fields present with a value."""
    changes = request.model_dump(exclude=_IDENTITY_FIELDS, exclude_none=True)
    return await _apply_item_changes(store, request.eori, request.record_id, changes, now)


async def update_record(
    store: TraderStore, request: UpdateGoodsItemRecordRequest, now: datetime
) -> tuple[GoodsItemRecord, TraderProfile]:
    """Replace every supplied payload field.

    An explicit ``null`` clears an optional field; it is ignored for fields a
    goods item cannot be without.
    """
    changes = {
        name: value
        for name, value in request.model_dump(exclude=_IDENTITY_FIELDS, exclude_unset=True).items()
        if value is not None or name not in _REQUIRED_ITEM_FIELDS
    }
    if changes.get("assessments", []) is None:
        changes["assessments"] = []
    return await _apply_item_changes(store, request.eori, request.record_id, changes, now)


async def remove_record(store: TraderStore, request: RemoveGoodsItemRecordRequest, now: datetime) -> None:
    await require_profile(store, request.eori)
    record = await store.get_record(request.eori, request.record_id)
    if record is not None and not record.metadata.active:
        raise RecordAlreadyRemovedError()
    record = _ensure_mutable(record)
    removed = record.model_copy(update={"metadata": _bump(record.metadata, now, active=False)})
    await store.replace_record(removed)
    logger.info("Removed record %s", request.record_id)


async def apply_metadata_patch(store: TraderStore, request: MetadataPatchRequest, now: datetime) -> GoodsItemRecord:
    """Administrative update of a record's metadata envelope.

    Skips the lock and profile checks so a locked record can be released.
    Raises ``IllegalAccreditationTransitionError`` for an illegal status move.
    """
    record = await store.get_record(request.eori, request.record_id)
    if record is None:
        raise RecordNotFoundError()

    changes: dict[str, Any] = {}
    if request.accreditation_status is not None:
        changes["accreditation_status"] = transition(
            record.metadata.accreditation_status, request.accreditation_status
        )
    if request.locked is not None:
        changes["locked"] = request.locked
    to_review = record.metadata.to_review if request.to_review is None else request.to_review
    if request.to_review is not None:
        changes["to_review"] = to_review
    if not to_review:
        changes["review_reason"] = None
    elif request.review_reason is not None:
        changes["review_reason"] = request.review_reason

    updated = record.model_copy(update={"metadata": _bump(record.metadata, now, **changes)})
    await store.replace_record(updated)
    logger.info("Patched metadata of record %s: %s", request.record_id, sorted(changes))
    return updated
