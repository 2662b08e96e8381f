from __future__ import annotations

from fastapi import FastAPI

from trader_goods_stub.api.errors import install_exception_handlers
from trader_goods_stub.api.lifespan import lifespan
from trader_goods_stub.api.middleware import HeaderPropagationMiddleware
from trader_goods_stub.api.routes.health import router as health_router
from trader_goods_stub.api.routes.profiles import router as profiles_router
from trader_goods_stub.api.routes.records import router as records_router
from trader_goods_stub.api.routes.root import router as root_router
from trader_goods_stub.api.routes.test_support import router as test_support_router
from trader_goods_stub.config import Settings, get_settings
from trader_goods_stub.core.schemas import SchemaRegistry


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Trader Goods Profiles Stub",
        description="Goods item records and trader profiles with schema-validated writes.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # A missing or malformed request schema stops the app here, not on first use
    registry = SchemaRegistry(settings.schema_dir)
    registry.preload()
    app.state.schema_registry = registry
    app.dependency_overrides[get_settings] = lambda: settings

    install_exception_handlers(app)
    app.add_middleware(HeaderPropagationMiddleware)

    app.include_router(root_router, include_in_schema=False)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(records_router)
    app.include_router(profiles_router)
    app.include_router(test_support_router)

    return app
