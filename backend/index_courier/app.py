"""FastAPI application setup for index-courier."""

from __future__ import annotations

from fastapi import FastAPI

from index_courier.api.dependencies import (
    get_app_settings,
    get_bulk_pipeline,
    get_collector,
    get_index_admin,
    get_transport,
    reset_singletons,
)
from index_courier.api.routes_admin import router as admin_router
from index_courier.api.routes_bulk import router as bulk_router
from index_courier.api.routes_search import router as search_router
from index_courier.core.logging import configure_logging

configure_logging()

app = FastAPI(
    title="index-courier",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(search_router, prefix="", tags=["search"])
app.include_router(bulk_router, prefix="", tags=["bulk"])
app.include_router(admin_router, prefix="", tags=["admin"])


@app.on_event("startup")
async def startup() -> None:
    """Warm up core singletons on startup."""
    get_app_settings()
    get_transport()
    get_collector()
    get_bulk_pipeline()
    get_index_admin()


@app.on_event("shutdown")
async def shutdown() -> None:
    reset_singletons()


@app.get("/health", tags=["admin"])
def health() -> dict[str, bool]:
    """Simple liveness check."""
    return {"ok": True}
