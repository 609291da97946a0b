"""Selects the records a report for a given window should see.

A record is relevant when it was created inside the window, unless it had
already been closed on or before the window's first day. Records created
before the window are excluded even if they were still open during it; reports
built on this data describe activity *created* in the window.
"""

from __future__ import annotations

from collections.abc import Iterable

from .dates import DateWindow, date_ge, date_le
from .models import Record


def is_relevant(record: Record, window: DateWindow) -> bool:
    if record.closed_at is not None and date_le(record.closed_at, window.start_date):
        return False
    return date_ge(record.created_at, window.start_date) and date_le(
        record.created_at, window.end_date
    )


def filter_relevant(records: Iterable[Record], window: DateWindow) -> list[Record]:
    return [record for record in records if is_relevant(record, window)]


__all__ = ["filter_relevant", "is_relevant"]
