from fastapi import APIRouter, Depends, Response, status

from trader_goods_stub.api.dependencies import get_store
from trader_goods_stub.api.schemas import HealthResponse, ReadinessResponse
from trader_goods_stub.core.ports.store import TraderStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: is the process alive?"""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    store: TraderStore = Depends(get_store),
) -> ReadinessResponse:
    """Readiness probe: can the record store be reached?"""
    if await store.ping():
        return ReadinessResponse(status="ok", database="up")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", database="down")
