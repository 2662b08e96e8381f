"""Mapping of request and domain failures onto the upstream error body."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from trader_goods_stub.api.schemas import ErrorDetail, ErrorResponse, SourceFaultDetail, ValidationErrorItem
from trader_goods_stub.core.errors import InvalidJsonError, StubError, ValidationFailedError
from trader_goods_stub.core.validation import format_errors

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-Id"

BAD_REQUEST = "Bad Request"
BACKEND_SOURCE = "BACKEND"
INVALID_MESSAGE = "Invalid message : Bad Request"
JSON_VALIDATION_SOURCE = "Json Validation"


class ForbiddenError(Exception):
    """The ``Authorization`` header is missing or wrong."""


class RequestRejectedError(Exception):
    """Headers or query parameters failed their checks; ``details`` lists every failure."""

    def __init__(self, details: Sequence[str]) -> None:
        super().__init__("; ".join(details))
        self.details = list(details)


def bad_request(
    request: Request,
    *,
    message: str,
    source: str,
    detail: Sequence[str],
    validation_errors: list[ValidationErrorItem] | None = None,
) -> JSONResponse:
    correlation_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())
    body = ErrorResponse(
        error_detail=ErrorDetail(
            correlation_id=correlation_id,
            timestamp=datetime.now(timezone.utc),
            error_code="400",
            error_message=message,
            source=source,
            source_fault_detail=SourceFaultDetail(detail=list(detail)),
            validation_errors=validation_errors,
        )
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers={CORRELATION_ID_HEADER: correlation_id},
    )


async def _forbidden(_request: Request, _exc: Exception) -> Response:
    return Response(status_code=status.HTTP_403_FORBIDDEN)


async def _request_rejected(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, RequestRejectedError)
    return bad_request(request, message=BAD_REQUEST, source=BACKEND_SOURCE, detail=exc.details)


async def _stub_error(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, StubError)
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.detail)
    return bad_request(request, message=BAD_REQUEST, source=BACKEND_SOURCE, detail=[exc.detail])


async def _validation_failed(request: Request, exc: Exception) -> Response:
    assert isinstance(exc, ValidationFailedError)
    return bad_request(
        request,
        message=INVALID_MESSAGE,
        source=JSON_VALIDATION_SOURCE,
        detail=format_errors(exc.errors),
        validation_errors=[ValidationErrorItem(location=e.location, message=e.message) for e in exc.errors],
    )


async def _invalid_json(request: Request, _exc: Exception) -> Response:
    return bad_request(request, message=INVALID_MESSAGE, source=JSON_VALIDATION_SOURCE, detail=[])


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ForbiddenError, _forbidden)
    app.add_exception_handler(RequestRejectedError, _request_rejected)
    app.add_exception_handler(StubError, _stub_error)
    app.add_exception_handler(ValidationFailedError, _validation_failed)
    app.add_exception_handler(InvalidJsonError, _invalid_json)
