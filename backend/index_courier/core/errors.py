"""Error hierarchy for search engine interactions."""

from __future__ import annotations


class SearchClientError(Exception):
    """Base class for whole-request failures raised by index-courier."""


class TransportError(SearchClientError):
    """The request failed in transit or its reply could not be read."""


class ResponseError(SearchClientError):
    """The engine answered with a structured error envelope."""

    def __init__(self, status: int, error_type: str | None = None, reason: str | None = None) -> None:
        self.status = status
        self.error_type = error_type
        self.reason = reason
        super().__init__(f"[{status}] {error_type or 'unknown_error'}: {reason or 'no reason given'}")


class CursorExhausted(SearchClientError):
    """A fetch was attempted on a cursor that already reached its end."""


class OperationCancelled(SearchClientError):
    """The caller cancelled the operation before this request was sent."""


__all__ = [
    "SearchClientError",
    "TransportError",
    "ResponseError",
    "CursorExhausted",
    "OperationCancelled",
]
