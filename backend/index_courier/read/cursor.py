"""Continuation token lifecycle for one logical paginated query."""

from __future__ import annotations

from index_courier.core.errors import CursorExhausted
from index_courier.models.entities import CursorState


class ScrollCursor:
    """Tracks the scroll token between consecutive page fetches.

    ``UNINITIALIZED`` until the first page arrives, ``ACTIVE`` while the
    engine keeps handing out tokens, ``EXHAUSTED`` once a page comes back
    without one or the cursor is closed. ``EXHAUSTED`` is terminal.
    """

    def __init__(self, keepalive: str = "1m") -> None:
        self.keepalive = keepalive
        self.token: str | None = None
        self.state = CursorState.UNINITIALIZED
        self.pages = 0

    @property
    def exhausted(self) -> bool:
        return self.state is CursorState.EXHAUSTED

    def ensure_open(self) -> None:
        if self.exhausted:
            raise CursorExhausted("Cursor is exhausted; start a new query to fetch more pages")

    def advance(self, token: str | None) -> None:
        """Record the token returned by the latest fetch."""
        self.ensure_open()
        self.pages += 1
        if token:
            self.token = token
            self.state = CursorState.ACTIVE
        else:
            self.token = None
            self.state = CursorState.EXHAUSTED

    def close(self) -> str | None:
        """Exhaust the cursor, returning the token it still held (if any)."""
        token = self.token
        self.token = None
        self.state = CursorState.EXHAUSTED
        return token

    def __repr__(self) -> str:
        return f"ScrollCursor(state={self.state.value}, pages={self.pages})"


__all__ = ["ScrollCursor"]
