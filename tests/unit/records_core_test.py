"""Unit tests for the record lifecycle operations over the in-memory store."""

import asyncio
from datetime import timedelta
from typing import Any

import pytest

from tests.conftest import EORI, NOW, profile_payload, record_payload
from trader_goods_stub.core import records
from trader_goods_stub.core.errors import (
    DuplicateTraderRefError,
    IllegalAccreditationTransitionError,
    ProfileNotFoundError,
    RecordAlreadyRemovedError,
    RecordInactiveError,
    RecordLockedError,
    RecordNotFoundError,
)
from trader_goods_stub.core.profiles import create_profile
from trader_goods_stub.db import InMemoryTraderStore
from trader_goods_stub.models import (
    AccreditationStatus,
    CreateGoodsItemRecordRequest,
    CreateTraderProfileRequest,
    GoodsItemRecord,
    MetadataPatchRequest,
    RemoveGoodsItemRecordRequest,
    UpdateGoodsItemRecordRequest,
)

LATER = NOW + timedelta(hours=1)


@pytest.fixture
def profiled_store(store: InMemoryTraderStore) -> InMemoryTraderStore:
    asyncio.run(create_profile(store, CreateTraderProfileRequest.model_validate(profile_payload()), NOW))
    return store


def _create(store: InMemoryTraderStore, **overrides: Any) -> GoodsItemRecord:
    request = CreateGoodsItemRecordRequest.model_validate(record_payload(**overrides))
    record, _ = asyncio.run(records.create_record(store, request, NOW))
    return record


def _update(record: GoodsItemRecord, **fields: Any) -> UpdateGoodsItemRecordRequest:
    return UpdateGoodsItemRecordRequest.model_validate(
        {"recordId": record.record_id, "eori": record.goods_item.eori, "actorId": record.goods_item.actor_id, **fields}
    )


def _remove(record: GoodsItemRecord) -> RemoveGoodsItemRecordRequest:
    return RemoveGoodsItemRecordRequest(
        eori=record.goods_item.eori, record_id=record.record_id, actor_id=record.goods_item.actor_id
    )


def _patch_metadata(store: InMemoryTraderStore, record: GoodsItemRecord, **fields: Any) -> GoodsItemRecord:
    request = MetadataPatchRequest(eori=record.goods_item.eori, record_id=record.record_id, **fields)
    return asyncio.run(records.apply_metadata_patch(store, request, LATER))


class TestCreateRecord:
    def test_initial_metadata(self, profiled_store: InMemoryTraderStore) -> None:
        record = _create(profiled_store)
        meta = record.metadata

        assert meta.version == 1
        assert meta.active is True
        assert meta.locked is False
        assert meta.to_review is False
        assert meta.accreditation_status is AccreditationStatus.NOT_REQUESTED
        assert meta.src_system_name == "MDTP"
        assert meta.created_date_time == meta.updated_date_time == NOW
        assert len(record.record_id) == 36

    def test_requires_profile(self, store: InMemoryTraderStore) -> None:
        with pytest.raises(ProfileNotFoundError):
            _create(store)

    def test_duplicate_trader_ref(self, profiled_store: InMemoryTraderStore) -> None:
        _create(profiled_store)
        with pytest.raises(DuplicateTraderRefError) as excinfo:
            _create(profiled_store)
        assert excinfo.value.detail == "error: 010, message: Invalid Request Parameter"

    def test_trader_ref_is_reusable_after_removal(self, profiled_store: InMemoryTraderStore) -> None:
        first = _create(profiled_store)
        asyncio.run(records.remove_record(profiled_store, _remove(first), LATER))
        assert _create(profiled_store).record_id != first.record_id

    def test_missing_assessments_become_empty(self, profiled_store: InMemoryTraderStore) -> None:
        record = _create(profiled_store, assessments=None)
        assert record.goods_item.assessments == []


class TestGetRecord:
    def test_returns_record_and_profile(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        record, profile = asyncio.run(records.get_record(profiled_store, EORI, created.record_id))
        assert record == created
        assert profile.eori == EORI

    def test_unknown_record(self, profiled_store: InMemoryTraderStore) -> None:
        with pytest.raises(RecordNotFoundError):
            asyncio.run(records.get_record(profiled_store, EORI, "missing"))

    def test_removed_record_is_still_readable(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        asyncio.run(records.remove_record(profiled_store, _remove(created), LATER))
        record, _ = asyncio.run(records.get_record(profiled_store, EORI, created.record_id))
        assert record.metadata.active is False


class TestListRecords:
    def _create_many(self, store: InMemoryTraderStore, count: int) -> list[GoodsItemRecord]:
        return [_create(store, traderRef=f"REF{i:03d}") for i in range(count)]

    def test_pages_are_sorted_and_sliced(self, profiled_store: InMemoryTraderStore) -> None:
        created = self._create_many(profiled_store, 7)
        expected = sorted(r.record_id for r in created)

        listing, _ = asyncio.run(records.list_records(profiled_store, EORI, page=1, size=3))

        assert [r.record_id for r in listing.records] == expected[3:6]
        assert listing.pagination.total_records == 7
        assert listing.pagination.total_pages == 3
        assert listing.pagination.next_page == 2
        assert listing.pagination.previous_page == 0

    def test_page_past_the_end_returns_last_page(self, profiled_store: InMemoryTraderStore) -> None:
        created = self._create_many(profiled_store, 7)

        listing, _ = asyncio.run(records.list_records(profiled_store, EORI, page=9, size=3))

        assert listing.pagination.current_page == 2
        assert [r.record_id for r in listing.records] == sorted(r.record_id for r in created)[6:]

    def test_empty_listing(self, profiled_store: InMemoryTraderStore) -> None:
        listing, _ = asyncio.run(records.list_records(profiled_store, EORI, page=4, size=10))
        assert listing.records == []
        assert listing.pagination.current_page == 0
        assert listing.pagination.total_pages == 0

    def test_removed_records_are_hidden_unless_requested(self, profiled_store: InMemoryTraderStore) -> None:
        kept, removed = self._create_many(profiled_store, 2)
        asyncio.run(records.remove_record(profiled_store, _remove(removed), LATER))

        visible, _ = asyncio.run(records.list_records(profiled_store, EORI, page=0, size=10))
        everything, _ = asyncio.run(
            records.list_records(profiled_store, EORI, page=0, size=10, include_inactive=True)
        )

        assert [r.record_id for r in visible.records] == [kept.record_id]
        assert [r.record_id for r in everything.records] == [kept.record_id, removed.record_id]

    def test_filters_by_last_updated(self, profiled_store: InMemoryTraderStore) -> None:
        old, touched = self._create_many(profiled_store, 2)
        asyncio.run(records.patch_record(profiled_store, _update(touched, goodsDescription="Plantains"), LATER))

        listing, _ = asyncio.run(records.list_records(profiled_store, EORI, page=0, size=10, updated_since=LATER))

        assert [r.record_id for r in listing.records] == [touched.record_id]
        assert old.record_id not in {r.record_id for r in listing.records}

    def test_requires_profile(self, store: InMemoryTraderStore) -> None:
        with pytest.raises(ProfileNotFoundError):
            asyncio.run(records.list_records(store, EORI, page=0, size=10))


class TestPatchRecord:
    def test_applies_only_supplied_fields(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)

        updated, _ = asyncio.run(
            records.patch_record(profiled_store, _update(created, goodsDescription="Plantains"), LATER)
        )

        assert updated.goods_item.goods_description == "Plantains"
        assert updated.goods_item.comcode == created.goods_item.comcode
        assert updated.goods_item.measurement_unit == created.goods_item.measurement_unit
        assert updated.metadata.version == 2
        assert updated.metadata.updated_date_time == LATER
        assert updated.metadata.created_date_time == NOW

    def test_version_increases_on_every_mutation(self, profiled_store: InMemoryTraderStore) -> None:
        record = _create(profiled_store)
        versions = [record.metadata.version]
        for description in ("a", "b", "c"):
            record, _ = asyncio.run(
                records.patch_record(profiled_store, _update(record, goodsDescription=description), LATER)
            )
            versions.append(record.metadata.version)
        assert versions == [1, 2, 3, 4]

    def test_unknown_record(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        request = _update(created).model_copy(update={"record_id": "missing"})
        with pytest.raises(RecordNotFoundError):
            asyncio.run(records.patch_record(profiled_store, request, LATER))

    def test_locked_record(self, profiled_store: InMemoryTraderStore) -> None:
        created = _patch_metadata(profiled_store, _create(profiled_store), locked=True)
        with pytest.raises(RecordLockedError) as excinfo:
            asyncio.run(records.patch_record(profiled_store, _update(created, comcode="104102"), LATER))
        assert excinfo.value.detail == "error: 027, message: Invalid Request"

    def test_inactive_record_is_reported_before_lock(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        asyncio.run(records.remove_record(profiled_store, _remove(created), LATER))
        _patch_metadata(profiled_store, created, locked=True)
        with pytest.raises(RecordInactiveError) as excinfo:
            asyncio.run(records.patch_record(profiled_store, _update(created, comcode="104102"), LATER))
        assert excinfo.value.detail == "error: 031, message: Invalid Request"

    def test_trader_ref_clash(self, profiled_store: InMemoryTraderStore) -> None:
        _create(profiled_store, traderRef="FIRST")
        second = _create(profiled_store, traderRef="SECOND")
        with pytest.raises(DuplicateTraderRefError):
            asyncio.run(records.patch_record(profiled_store, _update(second, traderRef="FIRST"), LATER))


class TestUpdateRecord:
    def test_explicit_null_clears_optional_field(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)

        updated, _ = asyncio.run(
            records.update_record(
                profiled_store, _update(created, measurementUnit=None, assessments=None), LATER
            )
        )

        assert updated.goods_item.measurement_unit is None
        assert updated.goods_item.assessments == []
        assert updated.goods_item.supplementary_unit == created.goods_item.supplementary_unit

    def test_null_for_required_field_is_ignored(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        updated, _ = asyncio.run(records.update_record(profiled_store, _update(created, comcode=None), LATER))
        assert updated.goods_item.comcode == created.goods_item.comcode
        assert updated.metadata.version == 2

    def test_locked_record(self, profiled_store: InMemoryTraderStore) -> None:
        created = _patch_metadata(profiled_store, _create(profiled_store), locked=True)
        with pytest.raises(RecordLockedError):
            asyncio.run(records.update_record(profiled_store, _update(created, comcode="104102"), LATER))


class TestRemoveRecord:
    def test_soft_deletes_and_bumps_version(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        asyncio.run(records.remove_record(profiled_store, _remove(created), LATER))

        stored = asyncio.run(profiled_store.get_record(EORI, created.record_id))
        assert stored is not None
        assert stored.metadata.active is False
        assert stored.metadata.version == 2

    def test_already_removed(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        asyncio.run(records.remove_record(profiled_store, _remove(created), LATER))
        with pytest.raises(RecordAlreadyRemovedError) as excinfo:
            asyncio.run(records.remove_record(profiled_store, _remove(created), LATER))
        assert excinfo.value.detail == "error: 031, message: Invalid Request Parameter"

    def test_locked_record(self, profiled_store: InMemoryTraderStore) -> None:
        created = _patch_metadata(profiled_store, _create(profiled_store), locked=True)
        with pytest.raises(RecordLockedError):
            asyncio.run(records.remove_record(profiled_store, _remove(created), LATER))

    def test_unknown_record(self, profiled_store: InMemoryTraderStore) -> None:
        created = _create(profiled_store)
        request = _remove(created).model_copy(update={"record_id": "missing"})
        with pytest.raises(RecordNotFoundError):
            asyncio.run(records.remove_record(profiled_store, request, LATER))


class TestMetadataPatch:
    def test_accreditation_flow(self, profiled_store: InMemoryTraderStore) -> None:
        record = _create(profiled_store)
        record = _patch_metadata(profiled_store, record, accreditation_status=AccreditationStatus.PENDING)
        record = _patch_metadata(profiled_store, record, accreditation_status=AccreditationStatus.APPROVED)
        assert record.metadata.accreditation_status is AccreditationStatus.APPROVED
        assert record.metadata.version == 3

    def test_illegal_transition_leaves_record_unchanged(self, profiled_store: InMemoryTraderStore) -> None:
        record = _create(profiled_store)
        with pytest.raises(IllegalAccreditationTransitionError):
            _patch_metadata(profiled_store, record, accreditation_status=AccreditationStatus.APPROVED)
        assert asyncio.run(profiled_store.get_record(EORI, record.record_id)) == record

    def test_unlocks_a_locked_record(self, profiled_store: InMemoryTraderStore) -> None:
        record = _patch_metadata(profiled_store, _create(profiled_store), locked=True)
        record = _patch_metadata(profiled_store, record, locked=False)
        updated, _ = asyncio.run(records.patch_record(profiled_store, _update(record, comcode="104102"), LATER))
        assert updated.goods_item.comcode == "104102"

    def test_review_flag_and_resolution(self, profiled_store: InMemoryTraderStore) -> None:
        record = _create(profiled_store)
        record = _patch_metadata(profiled_store, record, to_review=True, review_reason="commodity")
        assert record.metadata.to_review is True
        assert record.metadata.review_reason == "commodity"

        record = _patch_metadata(profiled_store, record, to_review=False)
        assert record.metadata.to_review is False
        assert record.metadata.review_reason is None

    def test_reason_needs_the_review_flag(self, profiled_store: InMemoryTraderStore) -> None:
        record = _patch_metadata(profiled_store, _create(profiled_store), review_reason="commodity")
        assert record.metadata.to_review is False
        assert record.metadata.review_reason is None

    def test_reason_updates_a_record_under_review(self, profiled_store: InMemoryTraderStore) -> None:
        record = _patch_metadata(profiled_store, _create(profiled_store), to_review=True, review_reason="commodity")
        record = _patch_metadata(profiled_store, record, review_reason="inadequate")
        assert record.metadata.to_review is True
        assert record.metadata.review_reason == "inadequate"

    def test_unknown_record(self, profiled_store: InMemoryTraderStore) -> None:
        request = MetadataPatchRequest(eori=EORI, record_id="missing", locked=True)
        with pytest.raises(RecordNotFoundError):
            asyncio.run(records.apply_metadata_patch(profiled_store, request, LATER))
