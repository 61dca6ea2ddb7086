"""Tests for the scroll cursor state machine."""

from __future__ import annotations

import pytest

from index_courier.core.errors import CursorExhausted
from index_courier.models.entities import CursorState
from index_courier.read.cursor import ScrollCursor


def test_cursor_lifecycle() -> None:
    cursor = ScrollCursor(keepalive="30s")
    assert cursor.state is CursorState.UNINITIALIZED
    cursor.advance("t1")
    assert cursor.state is CursorState.ACTIVE
    cursor.advance("t2")
    assert cursor.token == "t2"
    cursor.advance(None)
    assert cursor.state is CursorState.EXHAUSTED
    assert cursor.token is None
    assert cursor.pages == 3


def test_first_short_page_exhausts_directly() -> None:
    cursor = ScrollCursor()
    cursor.advance(None)
    assert cursor.exhausted


def test_exhausted_cursor_rejects_fetches() -> None:
    cursor = ScrollCursor()
    cursor.advance(None)
    with pytest.raises(CursorExhausted):
        cursor.ensure_open()
    with pytest.raises(CursorExhausted):
        cursor.advance("late")


def test_close_returns_held_token_once() -> None:
    cursor = ScrollCursor()
    cursor.advance("t1")
    assert cursor.close() == "t1"
    assert cursor.exhausted
    assert cursor.close() is None
