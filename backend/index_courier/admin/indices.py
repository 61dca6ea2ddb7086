"""Index administration."""

from __future__ import annotations

from typing import Any, Mapping

from index_courier.core.logging import get_logger
from index_courier.transport.http import SearchTransport

logger = get_logger(__name__)


class IndexAdmin:
    """Create and drop indices; the mapping body is supplied by the caller."""

    def __init__(self, transport: SearchTransport) -> None:
        self.transport = transport

    def create_index(self, index: str, body: Mapping[str, Any] | None = None) -> dict[str, Any]:
        result = self.transport.create_index(index, body)
        logger.info("Created index %s", index)
        return result

    def delete_index(self, index: str) -> dict[str, Any]:
        result = self.transport.delete_index(index)
        logger.info("Deleted index %s", index)
        return result


__all__ = ["IndexAdmin"]
