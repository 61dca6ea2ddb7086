"""Chunking utilities."""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")


def chunk(ops: Sequence[T], chunk_size: int) -> list[list[T]]:
    """Split ``ops`` into consecutive chunks of at most ``chunk_size`` items.

    Order is preserved and only the last chunk may be short. The bound caps
    request body size, so callers writing large documents should pick a
    smaller value than they would for deletes.
    """
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")
    return [list(ops[start : start + chunk_size]) for start in range(0, len(ops), chunk_size)]


__all__ = ["chunk"]
