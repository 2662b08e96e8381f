from datetime import datetime
from enum import Enum, IntEnum

from pydantic import AwareDatetime, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for everything that crosses the wire: camelCase on the outside, snake_case inside."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(IntEnum):
    EXCLUDED = 1
    CONTROLLED = 2
    STANDARD = 3


class Declarable(str, Enum):
    IMMI_READY = "IMMI Ready"
    IMMI_NOT_READY = "Not Ready For IMMI"
    NOT_READY = "Not Ready For Use"


class AccreditationStatus(str, Enum):
    NOT_REQUESTED = "Not Requested"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Condition(WireModel):
    type: str | None = None
    condition_id: str | None = None
    condition_description: str | None = None
    condition_trader_text: str | None = None


class Assessment(WireModel):
    assessment_id: str | None = None
    primary_category: int | None = None
    condition: Condition | None = None


class GoodsItem(WireModel):
    eori: str
    actor_id: str
    trader_ref: str
    comcode: str
    goods_description: str
    country_of_origin: str
    category: Category
    assessments: list[Assessment] = []
    supplementary_unit: float | None = None
    measurement_unit: str | None = None
    comcode_effective_from_date: AwareDatetime
    comcode_effective_to_date: AwareDatetime | None = None


class GoodsItemMetadata(WireModel):
    accreditation_status: AccreditationStatus = AccreditationStatus.NOT_REQUESTED
    version: int = 1
    active: bool = True
    locked: bool = False
    to_review: bool = False
    review_reason: str | None = None
    src_system_name: str = "MDTP"
    created_date_time: datetime
    updated_date_time: datetime


class GoodsItemRecord(WireModel):
    record_id: str
    goods_item: GoodsItem
    metadata: GoodsItemMetadata

    def declarable(self, now: datetime) -> Declarable:
        item = self.goods_item
        if not (self.metadata.active and not self.metadata.to_review and self.comcode_in_effect(now)):
            return Declarable.NOT_READY
        if item.category == Category.EXCLUDED:
            return Declarable.IMMI_NOT_READY
        min_digits = 6 if item.category == Category.STANDARD else 8
        return Declarable.IMMI_READY if len(item.comcode) >= min_digits else Declarable.NOT_READY

    def comcode_in_effect(self, now: datetime) -> bool:
        item = self.goods_item
        if now < item.comcode_effective_from_date:
            return False
        return item.comcode_effective_to_date is None or now <= item.comcode_effective_to_date


class TraderProfile(WireModel):
    eori: str
    actor_id: str
    ukims_number: str | None = None
    nirms_number: str | None = None
    niphl_number: str | None = None
    last_updated: datetime


# --- Requests ---------------------------------------------------------------


class CreateGoodsItemRecordRequest(WireModel):
    eori: str
    actor_id: str
    trader_ref: str
    comcode: str
    goods_description: str
    country_of_origin: str
    category: Category
    assessments: list[Assessment] | None = None
    supplementary_unit: float | None = None
    measurement_unit: str | None = None
    comcode_effective_from_date: AwareDatetime
    comcode_effective_to_date: AwareDatetime | None = None


class UpdateGoodsItemRecordRequest(WireModel):
    """Body of both PATCH and PUT updates."""

    record_id: str
    eori: str
    actor_id: str
    trader_ref: str | None = None
    comcode: str | None = None
    goods_description: str | None = None
    country_of_origin: str | None = None
    category: Category | None = None
    assessments: list[Assessment] | None = None
    supplementary_unit: float | None = None
    measurement_unit: str | None = None
    comcode_effective_from_date: AwareDatetime | None = None
    comcode_effective_to_date: AwareDatetime | None = None


class RemoveGoodsItemRecordRequest(WireModel):
    eori: str
    record_id: str
    actor_id: str


class MetadataPatchRequest(WireModel):
    eori: str
    record_id: str
    accreditation_status: AccreditationStatus | None = None
    locked: bool | None = None
    to_review: bool | None = None
    review_reason: str | None = None


class CreateTraderProfileRequest(WireModel):
    eori: str
    actor_id: str
    ukims_number: str | None = None
    nirms_number: str | None = None
    niphl_number: str | None = None


class MaintainTraderProfileRequest(CreateTraderProfileRequest):
    pass


# --- Responses --------------------------------------------------------------


class GoodsItemRecordResponse(WireModel):
    record_id: str
    eori: str
    actor_id: str
    trader_ref: str
    comcode: str
    accreditation_status: AccreditationStatus
    goods_description: str
    country_of_origin: str
    category: Category
    assessments: list[Assessment]
    supplementary_unit: float | None
    measurement_unit: str | None
    comcode_effective_from_date: datetime
    comcode_effective_to_date: datetime | None
    version: int
    active: bool
    to_review: bool
    review_reason: str | None
    declarable: Declarable
    ukims_number: str | None
    nirms_number: str | None
    niphl_number: str | None
    locked: bool
    src_system_name: str
    created_date_time: datetime
    updated_date_time: datetime

    @classmethod
    def create_from(cls, record: GoodsItemRecord, profile: TraderProfile, now: datetime) -> "GoodsItemRecordResponse":
        item = record.goods_item
        meta = record.metadata
        return cls(
            record_id=record.record_id,
            eori=item.eori,
            actor_id=item.actor_id,
            trader_ref=item.trader_ref,
            comcode=item.comcode,
            accreditation_status=meta.accreditation_status,
            goods_description=item.goods_description,
            country_of_origin=item.country_of_origin,
            category=item.category,
            assessments=item.assessments,
            supplementary_unit=item.supplementary_unit,
            measurement_unit=item.measurement_unit,
            comcode_effective_from_date=item.comcode_effective_from_date,
            comcode_effective_to_date=item.comcode_effective_to_date,
            version=meta.version,
            active=meta.active,
            to_review=meta.to_review,
            review_reason=meta.review_reason,
            declarable=record.declarable(now),
            ukims_number=profile.ukims_number,
            nirms_number=profile.nirms_number,
            niphl_number=profile.niphl_number,
            locked=meta.locked,
            src_system_name=meta.src_system_name,
            created_date_time=meta.created_date_time,
            updated_date_time=meta.updated_date_time,
        )


class TraderProfileResponse(WireModel):
    eori: str
    actor_id: str
    ukims_number: str | None
    nirms_number: str | None
    niphl_number: str | None

    @classmethod
    def create_from(cls, profile: TraderProfile) -> "TraderProfileResponse":
        return cls(
            eori=profile.eori,
            actor_id=profile.actor_id,
            ukims_number=profile.ukims_number,
            nirms_number=profile.nirms_number,
            niphl_number=profile.niphl_number,
        )
