"""Report-facing views over fetched issues and pull requests.

These helpers compute the numbers a report generator needs (counts, ages,
label breakdowns) but leave all presentation to the caller.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any

from .cache import Cache
from .dates import DateWindow
from .fetcher import IssueFetcher
from .models import Record, ResourceType
from .paginator import PageSource
from .progress import ProgressObserver


class IssueSource:
    def __init__(self, fetcher: IssueFetcher):
        self.fetcher = fetcher

    @classmethod
    def issues(
        cls,
        repository: str,
        window: DateWindow,
        client: PageSource,
        cache: Cache,
        progress: ProgressObserver | None = None,
        host: str | None = None,
    ) -> IssueSource:
        return cls(
            IssueFetcher(
                repository, ResourceType.ISSUES, window, client, cache, progress=progress, host=host
            )
        )

    @classmethod
    def pulls(
        cls,
        repository: str,
        window: DateWindow,
        client: PageSource,
        cache: Cache,
        progress: ProgressObserver | None = None,
        host: str | None = None,
    ) -> IssueSource:
        return cls(
            IssueFetcher(
                repository,
                ResourceType.PULL_REQUESTS,
                window,
                client,
                cache,
                progress=progress,
                host=host,
            )
        )

    @property
    def resource(self) -> ResourceType:
        return self.fetcher.resource

    @property
    def pretty_type(self) -> str:
        return self.resource.pretty_name

    @property
    def window(self) -> DateWindow:
        return self.fetcher.window

    def to_list(self) -> list[Record]:
        return self.fetcher.data()

    def open(self) -> list[Record]:
        return [r for r in self.to_list() if not r.is_closed]

    def closed(self) -> list[Record]:
        return [r for r in self.to_list() if r.is_closed]

    def oldest(self) -> Record | None:
        records = self.open()
        return min(records, key=lambda r: (r.created_at, r.number)) if records else None

    def newest(self) -> Record | None:
        records = self.open()
        return max(records, key=lambda r: (r.created_at, r.number)) if records else None

    def average_age(self, now: datetime | None = None) -> timedelta | None:
        """Mean age of the open records, measured at ``now`` (default: current UTC time)."""
        records = self.open()
        if not records:
            return None
        now = now or datetime.now(timezone.utc)
        total = sum((now - r.created_at for r in records), timedelta())
        return total / len(records)

    def label_counts(self) -> dict[str, int]:
        counts: Counter[str] = Counter()
        for record in self.to_list():
            counts.update(record.labels)
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))

    def summary(self, now: datetime | None = None) -> dict[str, Any]:
        oldest = self.oldest()
        newest = self.newest()
        age = self.average_age(now)
        return {
            "type": self.resource.slug,
            "window": {
                "start": self.window.start_date.isoformat(),
                "end": self.window.end_date.isoformat(),
            },
            "total": len(self.to_list()),
            "open": len(self.open()),
            "closed": len(self.closed()),
            "oldest": oldest.to_node() if oldest else None,
            "newest": newest.to_node() if newest else None,
            "average_age_days": round(age.total_seconds() / 86400, 2) if age is not None else None,
            "labels": self.label_counts(),
        }


__all__ = ["IssueSource"]
