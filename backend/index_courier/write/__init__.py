"""Bulk mutation write path components."""

from .chunker import chunk
from .builder import BulkRequestBuilder
from .dispatcher import BulkDispatcher, classify_items
from .pipeline import BulkPipeline

__all__ = [
    "chunk",
    "BulkRequestBuilder",
    "BulkDispatcher",
    "classify_items",
    "BulkPipeline",
]
