"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from index_courier.admin.indices import IndexAdmin
from index_courier.core.config import Settings, get_settings
from index_courier.read import PageExecutor, PaginatedCollector
from index_courier.transport.http import SearchTransport
from index_courier.write import BulkPipeline

_TRANSPORT: SearchTransport | None = None
_COLLECTOR: PaginatedCollector | None = None
_PIPELINE: BulkPipeline | None = None
_INDEX_ADMIN: IndexAdmin | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_transport() -> SearchTransport:
    global _TRANSPORT
    if _TRANSPORT is None:
        _TRANSPORT = SearchTransport.from_settings(get_app_settings())
    return _TRANSPORT


def get_collector() -> PaginatedCollector:
    global _COLLECTOR
    if _COLLECTOR is None:
        settings = get_app_settings()
        executor = PageExecutor(get_transport(), keepalive=settings.scroll_keepalive)
        _COLLECTOR = PaginatedCollector.from_settings(executor, settings)
    return _COLLECTOR


def get_bulk_pipeline() -> BulkPipeline:
    global _PIPELINE
    if _PIPELINE is None:
        _PIPELINE = BulkPipeline.from_settings(get_transport(), get_app_settings())
    return _PIPELINE


def get_index_admin() -> IndexAdmin:
    global _INDEX_ADMIN
    if _INDEX_ADMIN is None:
        _INDEX_ADMIN = IndexAdmin(get_transport())
    return _INDEX_ADMIN


def reset_singletons() -> None:
    global _TRANSPORT, _COLLECTOR, _PIPELINE, _INDEX_ADMIN
    if _TRANSPORT is not None:
        _TRANSPORT.close()
    _TRANSPORT = None
    _COLLECTOR = None
    _PIPELINE = None
    _INDEX_ADMIN = None
    get_app_settings.cache_clear()


__all__ = [
    "get_app_settings",
    "get_transport",
    "get_collector",
    "get_bulk_pipeline",
    "get_index_admin",
    "reset_singletons",
]
