"""Tests for bulk body construction."""

from __future__ import annotations

import json

from index_courier.models.entities import Create, Delete, Upsert
from index_courier.write.builder import BulkRequestBuilder


def _lines(body: str) -> list[dict]:
    return [json.loads(line) for line in body.splitlines()]


def test_line_layout_per_op() -> None:
    ops = [
        Create(id="a", document={"title": "first"}),
        Delete(id="x"),
        Upsert(id="b", document={"title": "second\nline"}),
        Delete(id="y"),
    ]
    body = BulkRequestBuilder(retry_on_conflict=5).build("docs", ops)
    assert body.endswith("\n")
    lines = _lines(body)
    assert len(lines) == 2 + 1 + 2 + 1
    assert lines == [
        {"create": {"_index": "docs", "_id": "a"}},
        {"title": "first"},
        {"delete": {"_index": "docs", "_id": "x"}},
        {"update": {"_index": "docs", "_id": "b", "retry_on_conflict": 5}},
        {"doc": {"title": "second\nline"}, "doc_as_upsert": True},
        {"delete": {"_index": "docs", "_id": "y"}},
    ]


def test_action_order_mirrors_input() -> None:
    ops = [Delete(id=str(n)) if n % 2 else Create(id=str(n), document={"n": n}) for n in range(9)]
    lines = _lines(BulkRequestBuilder().build("docs", ops))
    actions = [line for line in lines if set(line) & {"create", "update", "delete"}]
    assert [next(iter(line.values()))["_id"] for line in actions] == [op.id for op in ops]


def test_default_retry_on_conflict() -> None:
    lines = _lines(BulkRequestBuilder().build("docs", [Upsert(id="b", document={})]))
    assert lines[0]["update"]["retry_on_conflict"] == 3


def test_empty_chunk_builds_empty_body() -> None:
    assert BulkRequestBuilder().build("docs", []) == ""
