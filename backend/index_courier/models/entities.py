"""Internal dataclasses for search results and bulk mutations."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from index_courier.core.errors import SearchClientError


@dataclass(frozen=True, slots=True)
class Query:
    """Opaque predicate document plus the page size requested for it."""

    body: Mapping[str, Any]
    size: int

    def request_body(self) -> dict[str, Any]:
        """Copy of the predicate with the page size applied."""
        return {**self.body, "size": self.size}


@dataclass(frozen=True, slots=True)
class Hit:
    id: str
    score: float
    source: Any = None


@dataclass(frozen=True, slots=True)
class ResultPage:
    hits: tuple[Hit, ...]
    total: int
    token: str | None = None
    scroll_id: str | None = field(default=None, repr=False)


class CursorState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class Create:
    id: str
    document: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Upsert:
    id: str
    document: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Delete:
    id: str


MutationOp = Union[Create, Upsert, Delete]


@dataclass(frozen=True, slots=True)
class ItemFailure:
    """One bulk item the engine rejected while its siblings went through."""

    id: str
    reason: str
    status: int | None = None


@dataclass(slots=True)
class BulkOutcome:
    """Result of dispatching a single chunk."""

    chunk_index: int
    submitted: int = 0
    failures: list[ItemFailure] = field(default_factory=list)
    error: SearchClientError | None = None
    ids: tuple[str, ...] = field(default=(), repr=False)

    @property
    def succeeded(self) -> int:
        return self.submitted - len(self.failures)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunk_index": self.chunk_index,
            "submitted": self.submitted,
            "succeeded": self.succeeded,
            "failures": [
                {"id": failure.id, "reason": failure.reason, "status": failure.status}
                for failure in self.failures
            ],
            "error": str(self.error) if self.error is not None else None,
        }


@dataclass(slots=True)
class BulkReport:
    """Aggregate of every chunk outcome for one logical bulk operation."""

    index: str
    outcomes: list[BulkOutcome] = field(default_factory=list)

    @property
    def submitted(self) -> int:
        return sum(outcome.submitted for outcome in self.outcomes)

    @property
    def failures(self) -> list[ItemFailure]:
        return [failure for outcome in self.outcomes for failure in outcome.failures]

    @property
    def errors(self) -> list[tuple[int, SearchClientError]]:
        return [(outcome.chunk_index, outcome.error) for outcome in self.outcomes if outcome.error is not None]

    @property
    def ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    def failed_ids(self) -> list[str]:
        """Identifiers worth retrying: rejected items plus every item of a failed chunk."""
        failed: list[str] = []
        for outcome in self.outcomes:
            if outcome.error is not None:
                failed.extend(outcome.ids)
            else:
                failed.extend(failure.id for failure in outcome.failures)
        return failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "ok": self.ok,
            "submitted": self.submitted,
            "failed": len(self.failures),
            "failed_ids": self.failed_ids(),
            "chunks": [outcome.to_dict() for outcome in self.outcomes],
        }


@dataclass(slots=True)
class CollectResult:
    """Pages gathered by one paginated collection and how it ended."""

    index: str
    pages: list[ResultPage] = field(default_factory=list)
    cursor_state: CursorState = CursorState.UNINITIALIZED
    error: SearchClientError | None = None

    @property
    def hits(self) -> list[Hit]:
        return [hit for page in self.pages for hit in page.hits]

    @property
    def total(self) -> int:
        return self.pages[0].total if self.pages else 0


__all__ = [
    "Query",
    "Hit",
    "ResultPage",
    "CursorState",
    "Create",
    "Upsert",
    "Delete",
    "MutationOp",
    "ItemFailure",
    "BulkOutcome",
    "BulkReport",
    "CollectResult",
]
