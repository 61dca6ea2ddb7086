"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

REQUEST_LATENCY = Histogram(
    "idxc_engine_request_latency_seconds",
    "Latency of requests sent to the search engine",
    labelnames=("operation",),
    registry=REGISTRY,
)

PAGES_FETCHED = Counter(
    "idxc_pages_fetched_total",
    "Result pages fetched from the search engine",
    labelnames=("index",),
    registry=REGISTRY,
)

HITS_FETCHED = Counter(
    "idxc_hits_fetched_total",
    "Hits fetched from the search engine",
    labelnames=("index",),
    registry=REGISTRY,
)

BULK_ITEMS = Counter(
    "idxc_bulk_items_total",
    "Bulk items submitted by outcome",
    labelnames=("index", "outcome"),
    registry=REGISTRY,
)

BULK_CHUNKS = Counter(
    "idxc_bulk_chunks_total",
    "Bulk chunks dispatched by status",
    labelnames=("index", "status"),
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "REQUEST_LATENCY",
    "PAGES_FETCHED",
    "HITS_FETCHED",
    "BULK_ITEMS",
    "BULK_CHUNKS",
    "metrics_response",
]
