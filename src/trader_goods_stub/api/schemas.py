from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from trader_goods_stub.core.pagination import PageDescriptor
from trader_goods_stub.models import GoodsItemRecordResponse, WireModel


class GetGoodsItemsResponse(WireModel):
    goods_item_records: list[GoodsItemRecordResponse]
    pagination: PageDescriptor


# --- Error body ---


class SourceFaultDetail(WireModel):
    detail: list[str]


class ValidationErrorItem(WireModel):
    location: str
    message: str


class ErrorDetail(WireModel):
    correlation_id: str
    timestamp: datetime
    error_code: str
    error_message: str
    source: str
    source_fault_detail: SourceFaultDetail
    validation_errors: list[ValidationErrorItem] | None = None


class ErrorResponse(WireModel):
    error_detail: ErrorDetail


# --- Health ---


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    database: str = "up"
