"""Test fixtures for index-courier."""

from __future__ import annotations

import json
import os
import sys
import threading
from pathlib import Path
from typing import Any, Mapping

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from index_courier.core.errors import ResponseError, TransportError  # noqa: E402


class FakeTransport:
    """In-memory stand-in for the engine REST API.

    ``search_errors`` maps the 1-based fetch number (search and scroll calls
    counted together) to an exception to raise instead of answering.
    ``bulk_rejects`` maps a document id to the error object reported for it.
    ``bulk_raise_on`` makes any bulk request touching one of those ids raise.
    """

    def __init__(self) -> None:
        self.indices: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.cleared: list[str] = []
        self.bulk_bodies: list[str] = []
        self.search_errors: dict[int, Exception] = {}
        self.bulk_rejects: dict[str, dict[str, Any]] = {}
        self.bulk_raise_on: set[str] = set()
        self._contexts: dict[str, dict[str, Any]] = {}
        self._fetches = 0
        self._lock = threading.Lock()

    def seed(self, index: str, count: int) -> None:
        docs = self.indices.setdefault(index, {})
        for number in range(1, count + 1):
            docs[f"doc-{number}"] = {"n": number}

    @property
    def fetch_count(self) -> int:
        return self._fetches

    # Search -----------------------------------------------------------

    def search(self, index: str, body: Mapping[str, Any], scroll: str | None = None) -> dict[str, Any]:
        self.calls.append(("search", dict(body)))
        self._tick()
        ids = list(self.indices.get(index, {}))
        size = body.get("size", 10)
        scroll_id = f"ctx-{len(self._contexts) + 1}"
        self._contexts[scroll_id] = {"index": index, "ids": ids, "offset": size, "size": size}
        return self._page(index, scroll_id, ids[:size], len(ids))

    def scroll(self, scroll_id: str, scroll: str) -> dict[str, Any]:
        self.calls.append(("scroll", scroll_id))
        self._tick()
        context = self._contexts.get(scroll_id)
        if context is None:
            raise ResponseError(404, "search_context_missing_exception", "No search context found")
        start = context["offset"]
        context["offset"] += context["size"]
        ids = context["ids"]
        return self._page(context["index"], scroll_id, ids[start : start + context["size"]], len(ids))

    def clear_scroll(self, scroll_id: str) -> dict[str, Any]:
        self.cleared.append(scroll_id)
        self._contexts.pop(scroll_id, None)
        return {"succeeded": True, "num_freed": 1}

    # Writes -----------------------------------------------------------

    def bulk(self, index: str, body: str, refresh: str | None = None) -> dict[str, Any]:
        lines = [json.loads(line) for line in body.splitlines() if line]
        with self._lock:
            self.bulk_bodies.append(body)
        items: list[dict[str, Any]] = []
        position = 0
        while position < len(lines):
            action, meta = next(iter(lines[position].items()))
            position += 1
            payload = None
            if action in {"create", "update", "index"}:
                payload = lines[position]
                position += 1
            if meta["_id"] in self.bulk_raise_on:
                raise TransportError("connection reset by peer")
            items.append({action: self._apply(index, action, meta["_id"], payload)})
        return {"took": 1, "errors": any("error" in next(iter(i.values())) for i in items), "items": items}

    def create_index(self, index: str, body: Mapping[str, Any] | None = None) -> dict[str, Any]:
        if index in self.indices:
            raise ResponseError(400, "resource_already_exists_exception", f"index [{index}] already exists")
        self.indices[index] = {}
        return {"acknowledged": True, "index": index}

    def delete_index(self, index: str) -> dict[str, Any]:
        if index not in self.indices:
            raise ResponseError(404, "index_not_found_exception", f"no such index [{index}]")
        del self.indices[index]
        return {"acknowledged": True}

    def close(self) -> None:
        pass

    # Internal helpers -------------------------------------------------

    def _tick(self) -> None:
        self._fetches += 1
        error = self.search_errors.get(self._fetches)
        if error is not None:
            raise error

    def _page(self, index: str, scroll_id: str, ids: list[str], total: int) -> dict[str, Any]:
        docs = self.indices.get(index, {})
        return {
            "_scroll_id": scroll_id,
            "hits": {
                "total": {"value": total, "relation": "eq"},
                "hits": [{"_id": doc_id, "_score": 1.0, "_source": docs[doc_id]} for doc_id in ids],
            },
        }

    def _apply(self, index: str, action: str, doc_id: str, payload: Any) -> dict[str, Any]:
        if doc_id in self.bulk_rejects:
            return {"_index": index, "_id": doc_id, "status": 409, "error": self.bulk_rejects[doc_id]}
        with self._lock:
            docs = self.indices.setdefault(index, {})
            if action == "create":
                docs[doc_id] = payload
                return {"_index": index, "_id": doc_id, "status": 201, "result": "created"}
            if action == "update":
                existed = doc_id in docs
                docs[doc_id] = {**docs.get(doc_id, {}), **payload["doc"]}
                return {"_index": index, "_id": doc_id, "status": 200 if existed else 201,
                        "result": "updated" if existed else "created"}
            if docs.pop(doc_id, None) is None:
                return {"_index": index, "_id": doc_id, "status": 404, "result": "not_found"}
            return {"_index": index, "_id": doc_id, "status": 200, "result": "deleted"}


@pytest.fixture(autouse=True)
def reset_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    for key in list(os.environ):
        if key.startswith("IDXC_"):
            monkeypatch.delenv(key, raising=False)

    from index_courier.api import dependencies as deps
    from index_courier.core.config import get_settings

    get_settings.cache_clear()
    deps.reset_singletons()
    yield
    get_settings.cache_clear()
    deps.reset_singletons()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
