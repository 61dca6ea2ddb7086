"""Multi-page collection on top of the scroll API."""

from __future__ import annotations

import threading
from typing import Any, Iterator, Mapping

from index_courier.core.config import Settings
from index_courier.core.errors import OperationCancelled, SearchClientError
from index_courier.core.logging import get_logger
from index_courier.models.entities import CollectResult, CursorState, Query, ResultPage
from index_courier.read.cursor import ScrollCursor
from index_courier.read.executor import PageExecutor

logger = get_logger(__name__)


class PaginatedCollector:
    """Drive a ScrollCursor through consecutive page fetches for one query."""

    def __init__(self, executor: PageExecutor, page_size: int = 5000, max_pages: int = 50) -> None:
        self.executor = executor
        self.page_size = page_size
        self.max_pages = max_pages

    @classmethod
    def from_settings(cls, executor: PageExecutor, settings: Settings) -> "PaginatedCollector":
        return cls(executor, page_size=settings.page_size, max_pages=settings.max_pages)

    def collect_all(
        self,
        index: str,
        query: Mapping[str, Any],
        page_size: int | None = None,
        max_pages: int | None = None,
        cancel: threading.Event | None = None,
    ) -> CollectResult:
        """Collect pages until the result set ends or ``max_pages`` is reached.

        A failing fetch does not discard earlier pages: they are returned
        together with the error on the result.
        """
        result = CollectResult(index=index)
        cursor = ScrollCursor(self.executor.keepalive)
        try:
            for page in self.iter_pages(index, query, page_size, max_pages, cursor=cursor, cancel=cancel):
                result.pages.append(page)
        except SearchClientError as exc:
            logger.warning(
                "Collection from %s stopped after %s pages: %s",
                index,
                len(result.pages),
                exc,
                extra={"ctx_index": index, "ctx_pages": len(result.pages)},
            )
            result.error = exc
        result.cursor_state = cursor.state
        return result

    def iter_pages(
        self,
        index: str,
        query: Mapping[str, Any],
        page_size: int | None = None,
        max_pages: int | None = None,
        cursor: ScrollCursor | None = None,
        cancel: threading.Event | None = None,
    ) -> Iterator[ResultPage]:
        """Lazily yield pages in arrival order; not restartable."""
        size = self.page_size if page_size is None else page_size
        limit = self.max_pages if max_pages is None else max_pages
        if size <= 0 or limit <= 0:
            raise ValueError("page_size and max_pages must be positive")
        cursor = cursor or ScrollCursor(self.executor.keepalive)
        cursor.ensure_open()
        if cursor.state is not CursorState.UNINITIALIZED:
            raise ValueError("A cursor serves exactly one query; create a new one")
        return self._pages(index, Query(body=query, size=size), limit, cursor, cancel)

    def _pages(
        self,
        index: str,
        query: Query,
        max_pages: int,
        cursor: ScrollCursor,
        cancel: threading.Event | None,
    ) -> Iterator[ResultPage]:
        scroll_id: str | None = None
        try:
            while not cursor.exhausted and cursor.pages < max_pages:
                if cancel is not None and cancel.is_set():
                    raise OperationCancelled(f"Collection from {index} cancelled after {cursor.pages} pages")
                if cursor.state is CursorState.UNINITIALIZED:
                    page = self.executor.fetch(index, query)
                else:
                    page = self.executor.fetch_continuation(index, cursor.token, query.size)
                scroll_id = page.scroll_id or scroll_id
                cursor.advance(page.token)
                yield page
        finally:
            cursor.close()
            if scroll_id:
                self._release(index, scroll_id)

    def _release(self, index: str, scroll_id: str) -> None:
        try:
            self.executor.transport.clear_scroll(scroll_id)
        except SearchClientError as exc:
            logger.warning("Failed to release scroll context: %s", exc, extra={"ctx_index": index})


__all__ = ["PaginatedCollector"]
