"""ASGI middleware that stamps the upstream correlation headers onto ``/tgp`` responses."""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from trader_goods_stub.api.errors import CORRELATION_ID_HEADER
from trader_goods_stub.api.headers import FORWARDED_HOST_HEADER, JSON_MEDIA_TYPE

PROPAGATED_PREFIX = "/tgp/"


class HeaderPropagationMiddleware(BaseHTTPMiddleware):
    """Echoes ``X-Correlation-Id`` and ``X-Forwarded-Host`` and forces a JSON content type.

    The correlation id comes from the request, else from the response (error
    handlers set one), else a fresh uuid4.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if not request.url.path.startswith(PROPAGATED_PREFIX):
            return response

        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER)
            or response.headers.get(CORRELATION_ID_HEADER)
            or str(uuid.uuid4())
        )
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        forwarded_host = request.headers.get(FORWARDED_HOST_HEADER)
        if forwarded_host is not None:
            response.headers[FORWARDED_HOST_HEADER] = forwarded_host
        response.headers["Content-Type"] = JSON_MEDIA_TYPE
        return response
