"""Cursor pagination over a repository connection.

The GraphQL queries used here do not ask for ``pageInfo.hasNextPage``.
Instead the paginator snapshots the cursor of the newest edge once, before
paging starts, and pages forward (oldest first) until it reaches that cursor.
Records created after the snapshot are deliberately left out of the run.

States::

    NOT_STARTED --first page--> PAGING --last cursor == sentinel--> DONE
    NOT_STARTED --sentinel is None-----------------------------------> DONE
    PAGING      --query raised---------------------------------> NOT_STARTED

If the sentinel record disappears mid-run, paging continues until an empty
page, and anything created after the snapshot time is dropped from the result.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Protocol

from .dates import parse_timestamp
from .logging import get_logger
from .models import Edge, Record, ResourceType
from .progress import NullProgress, ProgressObserver

CHUNK_SIZE = 100

_UNRESOLVED = object()


class PageSource(Protocol):
    def fetch_page(self, resource: ResourceType, after: str | None, first: int) -> list[Edge]: ...

    def fetch_last(self, resource: ResourceType, last: int = 1) -> list[Edge]: ...


class PaginationState(str, Enum):
    NOT_STARTED = "not_started"
    PAGING = "paging"
    DONE = "done"


class PaginationError(RuntimeError):
    """Raised when the server stops advancing or a paginator is reused."""


class CursorPaginator:
    def __init__(
        self,
        client: PageSource,
        resource: ResourceType,
        *,
        chunk_size: int = CHUNK_SIZE,
        progress: ProgressObserver | None = None,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.client = client
        self.resource = resource
        self.chunk_size = chunk_size
        self.progress = progress or NullProgress()
        self.pages_fetched = 0
        self.snapshot_created_at: datetime | None = None
        self._state = PaginationState.NOT_STARTED
        self._last_cursor: object = _UNRESOLVED

    @property
    def state(self) -> PaginationState:
        return self._state

    def resolve_last_cursor(self) -> str | None:
        """Cursor of the newest edge right now, or None for an empty collection.

        Queried at most once per paginator; later calls return the snapshot.
        The edge's ``createdAt``, when the server sends it, is kept as
        ``snapshot_created_at``.
        """
        if self._last_cursor is _UNRESOLVED:
            edges = self.client.fetch_last(self.resource, last=1)
            if edges:
                self._last_cursor = edges[-1].cursor
                created = edges[-1].node.get("createdAt")
                self.snapshot_created_at = parse_timestamp(created) if created else None
            else:
                self._last_cursor = None
        return self._last_cursor  # type: ignore[return-value]

    def is_terminal_cursor(self, cursor: str | None) -> bool:
        sentinel = self.resolve_last_cursor()
        return sentinel is None or cursor == sentinel

    def fetch_all(self) -> list[Record]:
        """Page through the snapshot and return every record in creation order.

        A failed query puts the paginator back in ``NOT_STARTED`` (keeping the
        snapshot) so the run can be repeated; a completed run cannot.
        """
        if self._state is not PaginationState.NOT_STARTED:
            raise PaginationError(f"paginator for {self.resource.value} has already run")
        records: list[Record] = []
        if self.is_terminal_cursor(None):
            self._state = PaginationState.DONE
            return records

        self._state = PaginationState.PAGING
        self.pages_fetched = 0
        cursor: str | None = None
        try:
            while self._state is PaginationState.PAGING:
                cursor = self._step(cursor, records)
        except Exception:
            self._state = PaginationState.NOT_STARTED
            raise
        if cursor is None or not self.is_terminal_cursor(cursor):
            return self._within_snapshot(records)
        return records

    def _within_snapshot(self, records: list[Record]) -> list[Record]:
        if self.snapshot_created_at is None:
            return records
        kept = [r for r in records if r.created_at <= self.snapshot_created_at]
        if len(kept) != len(records):
            get_logger().warning(
                f"dropped {len(records) - len(kept)} {self.resource.value} created after the snapshot",
                operation="paginate",
            )
        return kept

    def _step(self, after: str | None, records: list[Record]) -> str | None:
        edges = self.client.fetch_page(self.resource, after, self.chunk_size)
        self.pages_fetched += 1
        self.progress.on_page(self.resource, self.pages_fetched, len(edges))
        if not edges:
            get_logger().warning(
                f"{self.resource.value} ended before the snapshot cursor was reached",
                operation="paginate",
                pages=self.pages_fetched,
            )
            self._state = PaginationState.DONE
            return after

        records.extend(Record.from_node(edge.node) for edge in edges)
        next_cursor = edges[-1].cursor
        if self.is_terminal_cursor(next_cursor):
            self._state = PaginationState.DONE
        elif next_cursor == after:
            raise PaginationError(
                f"{self.resource.value} pagination did not advance past cursor {after!r}"
            )
        return next_cursor


__all__ = [
    "CHUNK_SIZE",
    "CursorPaginator",
    "PageSource",
    "PaginationError",
    "PaginationState",
]
