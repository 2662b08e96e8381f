"""Authorisation and mandatory-header checks for the ``/tgp`` endpoints.

Every missing or malformed header is reported in a single 400 response, so
the checks collect failures instead of stopping at the first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fastapi import Depends, Request

from trader_goods_stub.api.errors import CORRELATION_ID_HEADER, ForbiddenError, RequestRejectedError
from trader_goods_stub.config import Settings, get_settings

FORWARDED_HOST_HEADER = "X-Forwarded-Host"
JSON_MEDIA_TYPE = "application/json"
RFC_7231_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"


@dataclass(frozen=True)
class ValidatedHeaders:
    correlation_id: str
    forwarded_host: str


def _invalid_header(code: str) -> str:
    return f"error: {code}, message: Invalid Header"


def is_rfc_7231_date(value: str) -> bool:
    try:
        datetime.strptime(value, RFC_7231_FORMAT)
    except ValueError:
        return False
    return True


def authorize(request: Request, settings: Settings = Depends(get_settings)) -> None:
    if request.headers.get("Authorization") != settings.expected_auth_header:
        raise ForbiddenError()


def _check_headers(request: Request, media_header: str, media_code: str) -> ValidatedHeaders:
    headers = request.headers
    failures: list[str] = []

    correlation_id = headers.get(CORRELATION_ID_HEADER)
    if not correlation_id:
        failures.append(_invalid_header("001"))
    if not is_rfc_7231_date(headers.get("Date", "")):
        failures.append(_invalid_header("002"))
    if headers.get(media_header) != JSON_MEDIA_TYPE:
        failures.append(_invalid_header(media_code))
    forwarded_host = headers.get(FORWARDED_HOST_HEADER)
    if not forwarded_host:
        failures.append(_invalid_header("005"))

    if failures:
        raise RequestRejectedError(failures)
    assert correlation_id is not None and forwarded_host is not None
    return ValidatedHeaders(correlation_id=correlation_id, forwarded_host=forwarded_host)


def require_write_headers(request: Request, _auth: None = Depends(authorize)) -> ValidatedHeaders:
    return _check_headers(request, "Content-Type", "003")


def require_read_headers(request: Request, _auth: None = Depends(authorize)) -> ValidatedHeaders:
    return _check_headers(request, "Accept", "004")
