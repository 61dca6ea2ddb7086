"""NDJSON body construction for the bulk API."""

from __future__ import annotations

from typing import Any, Sequence

import orjson

from index_courier.models.entities import Create, Delete, MutationOp, Upsert


class BulkRequestBuilder:
    """Serialize a chunk of mutation ops into action/payload line pairs.

    Lines follow input order exactly; the engine reports per-item results
    positionally.
    """

    def __init__(self, retry_on_conflict: int = 3) -> None:
        self.retry_on_conflict = retry_on_conflict

    def build(self, index: str, ops: Sequence[MutationOp]) -> str:
        lines: list[bytes] = []
        for op in ops:
            lines.extend(self._lines(index, op))
        if not lines:
            return ""
        return (b"\n".join(lines) + b"\n").decode("utf-8")

    def _lines(self, index: str, op: MutationOp) -> list[bytes]:
        if isinstance(op, Create):
            return [
                _dumps({"create": {"_index": index, "_id": op.id}}),
                _dumps(dict(op.document)),
            ]
        if isinstance(op, Upsert):
            return [
                _dumps(
                    {
                        "update": {
                            "_index": index,
                            "_id": op.id,
                            "retry_on_conflict": self.retry_on_conflict,
                        }
                    }
                ),
                _dumps({"doc": dict(op.document), "doc_as_upsert": True}),
            ]
        if isinstance(op, Delete):
            return [_dumps({"delete": {"_index": index, "_id": op.id}})]
        raise TypeError(f"Unsupported mutation op: {op!r}")


def _dumps(payload: Any) -> bytes:
    return orjson.dumps(payload)


__all__ = ["BulkRequestBuilder"]
