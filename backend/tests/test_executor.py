"""Tests for single page fetches."""

from __future__ import annotations

import pytest

from index_courier.core.errors import ResponseError
from index_courier.models.entities import Query
from index_courier.read.executor import PageExecutor, normalize_page


def _raw(count: int, scroll_id: str | None = "ctx-1", total: object = None) -> dict:
    return {
        "_scroll_id": scroll_id,
        "hits": {
            "total": total if total is not None else {"value": 42, "relation": "eq"},
            "hits": [{"_id": f"d{i}", "_score": 0.5, "_source": {"i": i}} for i in range(count)],
        },
    }


@pytest.mark.parametrize("page_size", [1, 2, 5, 17])
def test_full_page_yields_token(page_size: int) -> None:
    page = normalize_page(_raw(page_size), page_size)
    assert page.token == "ctx-1"
    assert len(page.hits) == page_size


@pytest.mark.parametrize("page_size", [1, 2, 5, 17])
def test_short_page_never_yields_token(page_size: int) -> None:
    page = normalize_page(_raw(page_size - 1), page_size)
    assert page.token is None
    assert page.scroll_id == "ctx-1"


def test_normalize_page_fields() -> None:
    raw = _raw(2)
    raw["hits"]["hits"][1]["_score"] = None
    page = normalize_page(raw, 10)
    assert page.total == 42
    assert [hit.id for hit in page.hits] == ["d0", "d1"]
    assert page.hits[0].score == pytest.approx(0.5)
    assert page.hits[1].score == 0.0
    assert page.hits[0].source == {"i": 0}


def test_legacy_integer_total() -> None:
    assert normalize_page(_raw(1, total=7), 5).total == 7


def test_missing_scroll_id_means_no_token() -> None:
    assert normalize_page(_raw(3, scroll_id=None), 3).token is None


def test_fetch_sends_sized_copy_of_query(transport) -> None:
    transport.seed("docs", 3)
    body = {"query": {"match_all": {}}}
    page = PageExecutor(transport, keepalive="2m").fetch("docs", Query(body=body, size=2))
    assert body == {"query": {"match_all": {}}}
    assert transport.calls[0] == ("search", {"query": {"match_all": {}}, "size": 2})
    assert page.token is not None
    assert page.total == 3


def test_fetch_does_not_retry_on_error(transport) -> None:
    transport.search_errors[1] = ResponseError(400, "parsing_exception", "bad query")
    executor = PageExecutor(transport)
    with pytest.raises(ResponseError) as excinfo:
        executor.fetch("docs", Query(body={}, size=2))
    assert excinfo.value.status == 400
    assert transport.fetch_count == 1
