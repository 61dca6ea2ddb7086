"""Single bounded page fetches."""

from __future__ import annotations

from typing import Any, Mapping

from index_courier.core.logging import get_logger
from index_courier.core.metrics import HITS_FETCHED, PAGES_FETCHED
from index_courier.models.entities import Hit, Query, ResultPage
from index_courier.transport.http import SearchTransport

logger = get_logger(__name__)


class PageExecutor:
    """Issue one search or scroll request and normalize the response into a page."""

    def __init__(self, transport: SearchTransport, keepalive: str = "1m") -> None:
        self.transport = transport
        self.keepalive = keepalive

    def fetch(self, index: str, query: Query) -> ResultPage:
        raw = self.transport.search(index, query.request_body(), scroll=self.keepalive)
        page = normalize_page(raw, query.size)
        self._record(index, page)
        return page

    def fetch_continuation(self, index: str, token: str, page_size: int) -> ResultPage:
        raw = self.transport.scroll(token, scroll=self.keepalive)
        page = normalize_page(raw, page_size)
        self._record(index, page)
        return page

    def _record(self, index: str, page: ResultPage) -> None:
        PAGES_FETCHED.labels(index=index).inc()
        HITS_FETCHED.labels(index=index).inc(len(page.hits))
        logger.debug(
            "Fetched %s hits from %s (total=%s, more=%s)",
            len(page.hits),
            index,
            page.total,
            page.token is not None,
            extra={"ctx_index": index},
        )


def normalize_page(raw: Mapping[str, Any], page_size: int) -> ResultPage:
    """Turn a raw search/scroll response into a ResultPage.

    A continuation token is only handed out when the page came back full;
    a short page means the result set ended here.
    """
    outer = raw.get("hits") or {}
    raw_hits = outer.get("hits") or []
    if len(raw_hits) > page_size:
        raw_hits = raw_hits[:page_size]
    hits = tuple(
        Hit(
            id=str(item.get("_id")),
            score=float(item.get("_score") or 0.0),
            source=item.get("_source"),
        )
        for item in raw_hits
    )
    scroll_id = raw.get("_scroll_id")
    token = scroll_id if scroll_id and len(hits) == page_size else None
    return ResultPage(hits=hits, total=_total(outer.get("total")), token=token, scroll_id=scroll_id)


def _total(value: Any) -> int:
    if isinstance(value, Mapping):
        return int(value.get("value") or 0)
    if value is None:
        return 0
    return int(value)


__all__ = ["PageExecutor", "normalize_page"]
