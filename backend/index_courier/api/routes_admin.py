"""Administrative routes for index-courier."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from index_courier.admin.indices import IndexAdmin
from index_courier.api.dependencies import get_index_admin
from index_courier.core.errors import ResponseError, SearchClientError
from index_courier.core.metrics import metrics_response
from index_courier.models.dto import IndexResponse

router = APIRouter()


@router.put("/indices/{index}", response_model=IndexResponse, summary="Create an index")
async def create_index(
    index: str,
    body: dict[str, Any] | None = Body(default=None),
    admin: IndexAdmin = Depends(get_index_admin),
) -> IndexResponse:
    try:
        result = await run_in_threadpool(admin.create_index, index, body)
    except SearchClientError as exc:
        raise _as_http_error(exc) from exc
    return IndexResponse(index=index, acknowledged=bool(result.get("acknowledged", True)))


@router.delete("/indices/{index}", response_model=IndexResponse, summary="Delete an index")
async def delete_index(index: str, admin: IndexAdmin = Depends(get_index_admin)) -> IndexResponse:
    try:
        result = await run_in_threadpool(admin.delete_index, index)
    except SearchClientError as exc:
        raise _as_http_error(exc) from exc
    return IndexResponse(index=index, acknowledged=bool(result.get("acknowledged", True)))


@router.get("/metrics", summary="Prometheus metrics")
async def metrics():
    return metrics_response()


def _as_http_error(exc: SearchClientError) -> HTTPException:
    if isinstance(exc, ResponseError):
        return HTTPException(
            status_code=exc.status,
            detail={"type": exc.error_type, "reason": exc.reason},
        )
    return HTTPException(status_code=502, detail=str(exc))
