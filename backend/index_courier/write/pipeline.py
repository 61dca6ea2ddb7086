"""Bulk write orchestration."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from index_courier.core.config import Settings
from index_courier.core.errors import OperationCancelled, SearchClientError
from index_courier.core.logging import get_logger
from index_courier.core.metrics import BULK_CHUNKS
from index_courier.models.entities import BulkOutcome, BulkReport, Delete, MutationOp
from index_courier.transport.http import SearchTransport
from index_courier.write.builder import BulkRequestBuilder
from index_courier.write.chunker import chunk
from index_courier.write.dispatcher import BulkDispatcher

logger = get_logger(__name__)


class BulkPipeline:
    """Coordinate chunking, body building, and concurrent dispatch."""

    def __init__(
        self,
        builder: BulkRequestBuilder,
        dispatcher: BulkDispatcher,
        chunk_size: int = 1000,
        delete_chunk_size: int = 20000,
        concurrency: int = 4,
    ) -> None:
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self.builder = builder
        self.dispatcher = dispatcher
        self.chunk_size = chunk_size
        self.delete_chunk_size = delete_chunk_size
        self.concurrency = concurrency

    @classmethod
    def from_settings(cls, transport: SearchTransport, settings: Settings) -> "BulkPipeline":
        return cls(
            builder=BulkRequestBuilder(retry_on_conflict=settings.retry_on_conflict),
            dispatcher=BulkDispatcher(transport, refresh=settings.bulk_refresh),
            chunk_size=settings.chunk_size,
            delete_chunk_size=settings.delete_chunk_size,
            concurrency=settings.bulk_concurrency,
        )

    def bulk_write(
        self,
        index: str,
        ops: Sequence[MutationOp],
        chunk_size: int | None = None,
        cancel: threading.Event | None = None,
    ) -> BulkReport:
        size = self.chunk_size if chunk_size is None else chunk_size
        return self._run(index, ops, size, cancel)

    def delete_by_ids(
        self,
        index: str,
        ids: Iterable[str],
        chunk_size: int | None = None,
        cancel: threading.Event | None = None,
    ) -> BulkReport:
        ops = [Delete(id=identifier) for identifier in ids]
        size = self.delete_chunk_size if chunk_size is None else chunk_size
        return self._run(index, ops, size, cancel)

    # Internal helpers -------------------------------------------------

    def _run(
        self,
        index: str,
        ops: Sequence[MutationOp],
        chunk_size: int,
        cancel: threading.Event | None,
    ) -> BulkReport:
        report = BulkReport(index=index)
        chunks = chunk(ops, chunk_size)
        if not chunks:
            return report
        # All bodies are serialized before the first request goes out.
        bodies = [self.builder.build(index, chunk_ops) for chunk_ops in chunks]
        workers = min(self.concurrency, len(chunks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="idxc-bulk") as pool:
            futures = [
                pool.submit(self._dispatch_chunk, index, chunk_index, body, chunk_ops, cancel)
                for chunk_index, (body, chunk_ops) in enumerate(zip(bodies, chunks))
            ]
            report.outcomes = [future.result() for future in futures]
        logger.info(
            "Bulk on %s finished: %s chunks, %s items submitted, %s item failures, %s chunk errors",
            index,
            len(report.outcomes),
            report.submitted,
            len(report.failures),
            len(report.errors),
            extra={"ctx_index": index},
        )
        return report

    def _dispatch_chunk(
        self,
        index: str,
        chunk_index: int,
        body: str,
        ops: Sequence[MutationOp],
        cancel: threading.Event | None,
    ) -> BulkOutcome:
        ids = tuple(op.id for op in ops)
        if cancel is not None and cancel.is_set():
            BULK_CHUNKS.labels(index=index, status="cancelled").inc()
            return BulkOutcome(
                chunk_index=chunk_index,
                error=OperationCancelled(f"Chunk {chunk_index} on {index} was not sent"),
                ids=ids,
            )
        try:
            outcome = self.dispatcher.submit(index, body, ids, chunk_index=chunk_index)
        except SearchClientError as exc:
            logger.warning(
                "Chunk %s on %s failed: %s",
                chunk_index,
                index,
                exc,
                extra={"ctx_index": index, "ctx_chunk": chunk_index},
            )
            BULK_CHUNKS.labels(index=index, status="error").inc()
            return BulkOutcome(chunk_index=chunk_index, error=exc, ids=ids)
        BULK_CHUNKS.labels(index=index, status="partial" if outcome.failures else "ok").inc()
        return outcome


__all__ = ["BulkPipeline"]
