"""HTTP transport for the search engine REST API."""

from __future__ import annotations

import threading
from typing import Any, Mapping, Sequence
from urllib.parse import quote

import orjson
import requests
from requests.adapters import HTTPAdapter

from index_courier.core.config import Settings
from index_courier.core.errors import ResponseError, TransportError
from index_courier.core.logging import get_logger
from index_courier.core.metrics import REQUEST_LATENCY

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"
NDJSON_CONTENT_TYPE = "application/x-ndjson"


class SearchTransport:
    """Request/response client shared by the read and write paths.

    One ``requests.Session`` backs every call, so the connection pool bound
    (``pool_maxsize``) caps how many requests can be in flight at once.
    Hosts are used round-robin; a failed request is never retried here.
    """

    def __init__(
        self,
        hosts: Sequence[str],
        auth: tuple[str, str] | None = None,
        timeout: float = 30.0,
        verify_certs: bool = True,
        pool_maxsize: int = 10,
        session: requests.Session | None = None,
    ) -> None:
        if not hosts:
            raise ValueError("At least one host is required")
        self.hosts = [host.rstrip("/") for host in hosts]
        self.timeout = timeout
        self._host_lock = threading.Lock()
        self._next_host = 0
        self.session = session or requests.Session()
        if session is None:
            adapter = HTTPAdapter(pool_connections=len(self.hosts), pool_maxsize=pool_maxsize)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)
        self.session.auth = auth
        self.session.verify = verify_certs

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchTransport":
        return cls(
            hosts=settings.hosts,
            auth=settings.auth,
            timeout=settings.request_timeout,
            verify_certs=settings.verify_certs,
            pool_maxsize=settings.pool_maxsize,
        )

    # Search -----------------------------------------------------------

    def search(self, index: str, body: Mapping[str, Any], scroll: str | None = None) -> dict[str, Any]:
        params: dict[str, str] = {"track_total_hits": "true"}
        if scroll:
            params["scroll"] = scroll
        return self._request(
            "POST",
            f"/{_quote(index)}/_search",
            operation="search",
            params=params,
            data=orjson.dumps(dict(body)),
        )

    def scroll(self, scroll_id: str, scroll: str) -> dict[str, Any]:
        return self._request(
            "POST",
            "/_search/scroll",
            operation="scroll",
            data=orjson.dumps({"scroll": scroll, "scroll_id": scroll_id}),
        )

    def clear_scroll(self, scroll_id: str) -> dict[str, Any]:
        return self._request(
            "DELETE",
            "/_search/scroll",
            operation="clear_scroll",
            data=orjson.dumps({"scroll_id": [scroll_id]}),
        )

    # Writes -----------------------------------------------------------

    def bulk(self, index: str, body: str, refresh: str | None = None) -> dict[str, Any]:
        params = {"refresh": refresh} if refresh else None
        return self._request(
            "POST",
            f"/{_quote(index)}/_bulk",
            operation="bulk",
            params=params,
            data=body.encode("utf-8"),
            content_type=NDJSON_CONTENT_TYPE,
        )

    def create_index(self, index: str, body: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"/{_quote(index)}",
            operation="create_index",
            data=orjson.dumps(dict(body)) if body else None,
        )

    def delete_index(self, index: str) -> dict[str, Any]:
        return self._request("DELETE", f"/{_quote(index)}", operation="delete_index")

    def close(self) -> None:
        self.session.close()

    # Internal helpers -------------------------------------------------

    def _pick_host(self) -> str:
        with self._host_lock:
            host = self.hosts[self._next_host % len(self.hosts)]
            self._next_host += 1
        return host

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Mapping[str, str] | None = None,
        data: bytes | None = None,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> dict[str, Any]:
        url = f"{self._pick_host()}{path}"
        headers = {"Content-Type": content_type, "Accept": JSON_CONTENT_TYPE}
        try:
            with REQUEST_LATENCY.labels(operation=operation).time():
                resp = self.session.request(
                    method,
                    url,
                    params=params,
                    data=data,
                    headers=headers,
                    timeout=self.timeout,
                )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if resp.status_code >= 400:
            raise _response_error(resp)
        if not resp.content:
            return {}
        try:
            return orjson.loads(resp.content)
        except orjson.JSONDecodeError as exc:
            raise TransportError(f"{method} {url} returned a malformed body") from exc


def _quote(index: str) -> str:
    return quote(index, safe=",*")


def _response_error(resp: requests.Response) -> ResponseError:
    """Build a ResponseError from the engine's error envelope."""
    try:
        payload = orjson.loads(resp.content)
    except orjson.JSONDecodeError:
        return ResponseError(resp.status_code, None, resp.text[:500] or resp.reason)
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return ResponseError(resp.status_code, error.get("type"), error.get("reason"))
    if isinstance(error, str):
        return ResponseError(resp.status_code, None, error)
    return ResponseError(resp.status_code, None, resp.reason)


__all__ = ["SearchTransport"]
