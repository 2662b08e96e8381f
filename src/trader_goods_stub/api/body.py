from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import pydantic
from fastapi import Depends, Request

from trader_goods_stub.api.dependencies import get_schema_registry
from trader_goods_stub.api.headers import ValidatedHeaders, require_write_headers
from trader_goods_stub.core.errors import InvalidJsonError, ValidationFailedError
from trader_goods_stub.core.schemas import SchemaRegistry
from trader_goods_stub.core.validation import ValidationError, format_pointer, to_pointer, validate
from trader_goods_stub.models import WireModel

M = TypeVar("M", bound=WireModel)


def _model_errors(exc: pydantic.ValidationError) -> list[ValidationError]:
    return [ValidationError(format_pointer(to_pointer(e["loc"])), e["msg"]) for e in exc.errors()]


async def read_json(request: Request) -> Any:
    try:
        return json.loads(await request.body())
    except ValueError as exc:
        raise InvalidJsonError() from exc


def validated_body(schema_name: str, model: type[M]) -> Callable[..., Awaitable[M]]:
    """Build a dependency that schema-checks the JSON body and parses it into ``model``.

    Runs after the header checks so a request with bad headers never has its
    body inspected.
    """

    async def dependency(
        request: Request,
        _headers: ValidatedHeaders = Depends(require_write_headers),
        registry: SchemaRegistry = Depends(get_schema_registry),
    ) -> M:
        document = await read_json(request)
        errors = validate(registry.get(schema_name), document)
        if errors:
            raise ValidationFailedError(errors)
        try:
            return model.model_validate(document)
        except pydantic.ValidationError as exc:
            raise ValidationFailedError(_model_errors(exc)) from exc

    return dependency
