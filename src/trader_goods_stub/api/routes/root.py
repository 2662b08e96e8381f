from __future__ import annotations

from typing import Any

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root discovery endpoint listing the stubbed operations."""
    return {
        "meta": {
            "title": "Trader Goods Profiles Stub",
            "description": "Goods item records and trader profiles with schema-validated writes.",
            "version": "0.1.0",
        },
        "links": {
            "self": "/",
            "createRecord": "/tgp/createrecord/v1",
            "getRecords": "/tgp/getrecords/v1/{eori}",
            "getRecord": "/tgp/getrecords/v1/{eori}/{recordId}",
            "updateRecord": "/tgp/updaterecord/v1",
            "removeRecord": "/tgp/removerecord/v1",
            "createProfile": "/tgp/createprofile/v1",
            "maintainProfile": "/tgp/maintainprofile/v1",
            "getProfile": "/tgp/getprofile/v1/{eori}",
            "health": "/health",
            "openapi": "/openapi.json",
            "docs": "/docs",
        },
    }
