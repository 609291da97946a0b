from __future__ import annotations

from typing import Any

from .cache import Cache, fetch_key
from .dates import DateWindow
from .logging import get_logger
from .models import Record, ResourceType
from .paginator import CHUNK_SIZE, CursorPaginator, PageSource
from .progress import NullProgress, ProgressObserver
from .relevance import filter_relevant


class IssueFetcher:
    """Fetches, caches and window-filters one resource type of a repository.

    The full, unfiltered history is what gets cached, under a key that depends
    only on the repository and the resource type, so every window can reuse it.
    ``data()`` does the work once per instance and keeps the result.
    """

    def __init__(
        self,
        repository: str,
        resource: ResourceType,
        window: DateWindow,
        client: PageSource,
        cache: Cache,
        *,
        progress: ProgressObserver | None = None,
        chunk_size: int = CHUNK_SIZE,
        host: str | None = None,
    ):
        self.repository = repository
        self.resource = resource
        self.window = window
        self.cache = cache
        self.progress = progress or NullProgress()
        self.cache_key = fetch_key(repository, resource, host)
        self.paginator = CursorPaginator(
            client, resource, chunk_size=chunk_size, progress=self.progress
        )
        self._result: list[Record] | None = None

    @property
    def fetched(self) -> bool:
        return self._result is not None

    def data(self) -> list[Record]:
        if self._result is None:
            self._result = self._fetch()
        return list(self._result)

    def _fetch(self) -> list[Record]:
        if self.paginator.resolve_last_cursor() is None:
            return []
        nodes = self.cache.cached(self.cache_key, self._fetch_nodes)
        records = [Record.from_node(node) for node in nodes]
        return filter_relevant(records, self.window)

    def _fetch_nodes(self) -> list[dict[str, Any]]:
        with get_logger().timed_operation(
            "fetch_history", repository=self.repository, resource=self.resource.slug
        ):
            self.progress.on_start(self.repository, self.resource)
            records = self.paginator.fetch_all()
            self.progress.on_finish(self.resource, len(records))
        return [record.to_node() for record in records]


__all__ = ["IssueFetcher"]
