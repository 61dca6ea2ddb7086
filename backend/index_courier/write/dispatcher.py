"""Single bulk request submission and per-item reconciliation."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from index_courier.core.errors import TransportError
from index_courier.core.logging import get_logger
from index_courier.core.metrics import BULK_ITEMS
from index_courier.models.entities import BulkOutcome, ItemFailure
from index_courier.transport.http import SearchTransport

logger = get_logger(__name__)


class BulkDispatcher:
    """Submit one NDJSON bulk body and classify every item in the reply."""

    def __init__(self, transport: SearchTransport, refresh: str | None = "false") -> None:
        self.transport = transport
        self.refresh = refresh

    def submit(self, index: str, body: str, ids: Sequence[str], chunk_index: int = 0) -> BulkOutcome:
        """Send ``body`` to the engine.

        ``ids`` lists the document ids in the order their actions appear in
        ``body``; reply items are matched to them by position.
        Whole-request failures propagate as TransportError/ResponseError.
        Rejected items are collected on the outcome and never raised.
        """
        raw = self.transport.bulk(index, body, refresh=self.refresh)
        outcome = classify_items(raw, ids, chunk_index)
        BULK_ITEMS.labels(index=index, outcome="succeeded").inc(outcome.succeeded)
        if outcome.failures:
            BULK_ITEMS.labels(index=index, outcome="failed").inc(len(outcome.failures))
            logger.warning(
                "Chunk %s on %s: %s of %s items rejected",
                chunk_index,
                index,
                len(outcome.failures),
                outcome.submitted,
                extra={"ctx_index": index, "ctx_chunk": chunk_index},
            )
        return outcome


def classify_items(raw: Mapping[str, Any], ids: Sequence[str], chunk_index: int = 0) -> BulkOutcome:
    items = raw.get("items") or []
    if len(items) != len(ids):
        raise TransportError(f"Bulk reply has {len(items)} items for {len(ids)} submitted actions")
    outcome = BulkOutcome(chunk_index=chunk_index, submitted=len(ids), ids=tuple(ids))
    for doc_id, item in zip(ids, items):
        # each entry is {"<action>": {...result...}}
        if not isinstance(item, Mapping) or len(item) != 1:
            raise TransportError(f"Malformed bulk reply item for {doc_id!r}: {item!r}")
        action, result = next(iter(item.items()))
        if not isinstance(result, Mapping):
            raise TransportError(f"Malformed bulk reply item for {doc_id!r}: {item!r}")
        failure = _item_failure(doc_id, action, result)
        if failure is not None:
            outcome.failures.append(failure)
    return outcome


def _item_failure(doc_id: str, action: str, result: Mapping[str, Any]) -> ItemFailure | None:
    status = result.get("status")
    error = result.get("error")
    if error is None and (status is None or status < 400):
        return None
    if error is None and action == "delete" and status == 404 and result.get("result") == "not_found":
        return None
    if isinstance(error, Mapping):
        reason = f"{error.get('type', 'error')}: {error.get('reason', '')}".rstrip(": ")
    elif error is not None:
        reason = str(error)
    else:
        reason = str(result.get("result") or f"status {status}")
    return ItemFailure(id=doc_id, reason=reason, status=status)


__all__ = ["BulkDispatcher", "classify_items"]
