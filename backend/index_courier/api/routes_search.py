"""Paginated collection routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from index_courier.api.dependencies import get_collector
from index_courier.models.dto import CollectRequest, CollectResponse
from index_courier.read.collector import PaginatedCollector

router = APIRouter()


@router.post("/collect", response_model=CollectResponse, summary="Collect a result set page by page")
async def collect(
    request: CollectRequest,
    collector: PaginatedCollector = Depends(get_collector),
) -> CollectResponse:
    result = await run_in_threadpool(
        collector.collect_all,
        request.index,
        request.query,
        request.page_size,
        request.max_pages,
    )
    return CollectResponse.from_result(result)
