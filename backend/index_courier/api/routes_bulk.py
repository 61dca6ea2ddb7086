"""Bulk mutation routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from index_courier.api.dependencies import get_bulk_pipeline
from index_courier.models.dto import BulkRequest, BulkResponse, DeleteByIdsRequest
from index_courier.write.pipeline import BulkPipeline

router = APIRouter()


@router.post("/bulk", response_model=BulkResponse, summary="Create, upsert, or delete documents in chunks")
async def bulk_write(
    request: BulkRequest,
    pipeline: BulkPipeline = Depends(get_bulk_pipeline),
) -> BulkResponse:
    ops = [item.to_op() for item in request.ops]
    report = await run_in_threadpool(pipeline.bulk_write, request.index, ops, request.chunk_size)
    return BulkResponse.from_report(report)


@router.post("/delete", response_model=BulkResponse, summary="Delete documents by identifier")
async def delete_by_ids(
    request: DeleteByIdsRequest,
    pipeline: BulkPipeline = Depends(get_bulk_pipeline),
) -> BulkResponse:
    report = await run_in_threadpool(pipeline.delete_by_ids, request.index, request.ids, request.chunk_size)
    return BulkResponse.from_report(report)
