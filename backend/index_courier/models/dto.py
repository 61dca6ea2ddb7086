"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from index_courier.models.entities import (
    BulkReport,
    CollectResult,
    Create,
    Delete,
    MutationOp,
    Upsert,
)


class CollectRequest(BaseModel):
    index: str
    query: dict[str, Any] = Field(default_factory=lambda: {"query": {"match_all": {}}})
    page_size: int | None = Field(default=None, ge=1, le=10000)
    max_pages: int | None = Field(default=None, ge=1)


class HitResult(BaseModel):
    id: str
    score: float
    source: Any = None


class PageResult(BaseModel):
    total: int
    hits: list[HitResult]
    has_more: bool


class ErrorDetail(BaseModel):
    type: str
    message: str
    status: int | None = None


class CollectResponse(BaseModel):
    index: str
    total: int
    cursor_state: Literal["uninitialized", "active", "exhausted"]
    pages: list[PageResult]
    error: ErrorDetail | None = None

    @classmethod
    def from_result(cls, result: CollectResult) -> "CollectResponse":
        error = None
        if result.error is not None:
            error = ErrorDetail(
                type=type(result.error).__name__,
                message=str(result.error),
                status=getattr(result.error, "status", None),
            )
        return cls(
            index=result.index,
            total=result.total,
            cursor_state=result.cursor_state.value,
            pages=[
                PageResult(
                    total=page.total,
                    hits=[HitResult(id=hit.id, score=hit.score, source=hit.source) for hit in page.hits],
                    has_more=page.token is not None,
                )
                for page in result.pages
            ],
            error=error,
        )


class MutationRequest(BaseModel):
    op: Literal["create", "upsert", "delete"]
    id: str
    document: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _document_required(self) -> "MutationRequest":
        if self.op != "delete" and self.document is None:
            raise ValueError(f"'{self.op}' requires a document")
        return self

    def to_op(self) -> MutationOp:
        if self.op == "create":
            return Create(id=self.id, document=self.document or {})
        if self.op == "upsert":
            return Upsert(id=self.id, document=self.document or {})
        return Delete(id=self.id)


class BulkRequest(BaseModel):
    index: str
    ops: list[MutationRequest]
    chunk_size: int | None = Field(default=None, ge=1)


class DeleteByIdsRequest(BaseModel):
    index: str
    ids: list[str]
    chunk_size: int | None = Field(default=None, ge=1)


class ItemFailureResult(BaseModel):
    id: str
    reason: str
    status: int | None = None


class ChunkResult(BaseModel):
    chunk_index: int
    submitted: int
    succeeded: int
    failures: list[ItemFailureResult]
    error: str | None = None


class BulkResponse(BaseModel):
    index: str
    ok: bool
    submitted: int
    failed: int
    failed_ids: list[str]
    chunks: list[ChunkResult]

    @classmethod
    def from_report(cls, report: BulkReport) -> "BulkResponse":
        return cls(**report.to_dict())


class IndexResponse(BaseModel):
    index: str
    acknowledged: bool


__all__ = [
    "CollectRequest",
    "CollectResponse",
    "PageResult",
    "HitResult",
    "ErrorDetail",
    "MutationRequest",
    "BulkRequest",
    "DeleteByIdsRequest",
    "BulkResponse",
    "ChunkResult",
    "ItemFailureResult",
    "IndexResponse",
]
