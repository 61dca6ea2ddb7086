"""Paginated read path components."""

from .executor import PageExecutor, normalize_page
from .cursor import ScrollCursor
from .collector import PaginatedCollector

__all__ = [
    "PageExecutor",
    "normalize_page",
    "ScrollCursor",
    "PaginatedCollector",
]
